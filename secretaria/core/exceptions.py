# secretaria/core/exceptions.py
"""Custom exceptions for the Secretaria Online application."""
from fastapi import HTTPException
from typing import Any, Dict, List, Optional


class SecretariaException(HTTPException):
    """Base exception for Secretaria Online application."""
    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, Any]] = None,
        details: Optional[List[Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.details = details


class ValidationError(SecretariaException):
    """Exception raised for malformed or out-of-range request fields."""
    def __init__(self, message: str = "Invalid data", details: Optional[List[Any]] = None):
        super().__init__(status_code=400, detail=message, details=details)


class AuthenticationError(SecretariaException):
    """Missing or invalid credentials (token or re-entered password)."""
    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            status_code=401,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"}
        )


class PermissionDenied(SecretariaException):
    """Caller's role or ownership is insufficient."""
    def __init__(self, message: str = "You do not have permission to access this resource"):
        super().__init__(status_code=403, detail=message)


class NotFoundError(SecretariaException):
    """Exception raised when a referenced entity does not exist."""
    def __init__(self, resource: str, id: Any = None):
        message = f"{resource} not found"
        if id is not None:
            message += f" with id: {id}"
        super().__init__(status_code=404, detail=message)


class DuplicateError(SecretariaException):
    """Exception raised when a uniqueness rule would be violated."""
    def __init__(self, message: str):
        super().__init__(status_code=409, detail=message)


class StateConflictError(SecretariaException):
    """Operation is invalid for the entity's current state."""
    def __init__(self, message: str):
        super().__init__(status_code=422, detail=message)


class DatabaseError(SecretariaException):
    """Exception raised for database errors; the transaction is already rolled back."""
    def __init__(self, message: str):
        super().__init__(status_code=500, detail=message)
