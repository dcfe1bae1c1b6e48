# secretaria/schemas/enrollment_schemas.py
"""Pydantic schemas for enrollment requests."""
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    student_id: int = Field(..., gt=0, description="Student profile id")
    course_id: int = Field(..., gt=0, description="Course id")
    enrollment_date: Optional[date] = Field(default=None, description="Defaults to today; cannot be in the future")
    current_semester: Optional[int] = Field(default=None, ge=0, le=12, description="0 means unknown")


class EnrollmentStatusUpdate(BaseModel):
    # Parsed by the status machine so unknown values get a descriptive 400
    status: str = Field(..., min_length=1, description="pending, active, cancelled, reenrollment or completed")


class CurrentSemesterUpdate(BaseModel):
    current_semester: int = Field(..., ge=0, le=12, description="Semester the student is attending (0 = unknown)")
