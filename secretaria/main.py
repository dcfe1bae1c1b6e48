from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import time

from .core.config import settings
from .core.database import close_db_connections
from .core.error_handlers import register_exception_handlers
from .core.logging import setup_logging
from .routers import contract_templates, contracts, enrollments, health, reenrollments

setup_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Secretaria Online API ({settings.environment})")

    yield

    logger.info("Shutting down Secretaria Online API")
    await close_db_connections()
    logger.info("Shutdown complete")

app = FastAPI(
    title="Secretaria Online API",
    description="Enrollment, reenrollment and contract management for school administration",
    version=settings.app_version,
    lifespan=lifespan
)

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(enrollments.router, prefix=API_PREFIX)
app.include_router(reenrollments.router, prefix=API_PREFIX)
app.include_router(contracts.router, prefix=API_PREFIX)
app.include_router(contract_templates.router, prefix=API_PREFIX)

@app.get("/")
async def root():
    return {
        "message": "Secretaria Online API",
        "version": settings.app_version,
        "status": "active"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("secretaria.main:app", host="0.0.0.0", port=8000, reload=True)
