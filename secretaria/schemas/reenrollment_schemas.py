# secretaria/schemas/reenrollment_schemas.py
"""Pydantic schemas for the global reenrollment workflow."""
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessAllRequest(BaseModel):
    """Body of ``POST /reenrollments/process-all``.

    ``adminPassword`` is the caller's own password, checked again even though
    the request already carries a valid token.
    """
    model_config = ConfigDict(populate_by_name=True)

    semester: int = Field(..., ge=1, le=2, description="Academic semester (1 or 2)")
    year: int = Field(..., ge=2020, le=2100, description="Academic year")
    admin_password: str = Field(..., alias="adminPassword", min_length=1, description="Administrator password")

    @field_validator("admin_password")
    @classmethod
    def validate_password(cls, v):
        if not v.strip():
            raise ValueError("Administrator password is required")
        return v
