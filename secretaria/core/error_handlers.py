# secretaria/core/error_handlers.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import logging

from .exceptions import SecretariaException

logger = logging.getLogger(__name__)


def _field_details(exc: RequestValidationError) -> list:
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        details.append({
            "field": ".".join(location),
            "message": error.get("msg"),
        })
    return details


async def secretaria_exception_handler(request: Request, exc: SecretariaException):
    """Handle domain exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Request failed: {exc.detail} - Path: {request.url.path}")
    else:
        logger.warning(f"Request rejected ({exc.status_code}): {exc.detail} - Path: {request.url.path}")
    content = {"success": False, "error": exc.detail}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Render framework HTTP errors (404 route, 405...) in the same envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request validation errors are reported as 400 with per-field details"""
    details = _field_details(exc)
    logger.warning(f"Validation failed on {request.url.path}: {details}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid data", "details": details}
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"}
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(SecretariaException, secretaria_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
