# secretaria/models/enrollment.py
import enum
from datetime import date

from sqlalchemy import Column, Integer, Date, Enum, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from .base import Base


class EnrollmentStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    REENROLLMENT = "reenrollment"
    COMPLETED = "completed"


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        # At most one open enrollment per (student, course)
        Index(
            "uq_enrollments_open_student_course",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=text("status <> 'cancelled' AND deleted_at IS NULL"),
            sqlite_where=text("status <> 'cancelled' AND deleted_at IS NULL"),
        ),
    )

    # Foreign Keys
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Enrollment Details
    status = Column(
        Enum(EnrollmentStatus, name="enrollment_status", native_enum=False, length=20,
             values_callable=lambda statuses: [s.value for s in statuses]),
        default=EnrollmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    enrollment_date = Column(Date, nullable=False, default=date.today)
    current_semester = Column(Integer, nullable=True)

    # Relationships
    student = relationship("Student", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
    contracts = relationship("Contract", back_populates="enrollment")
