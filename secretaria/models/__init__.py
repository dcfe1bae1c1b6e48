"""Import all models here, if needed for Alembic migration."""
from .base import Base, Active, Deleted, Lifecycle
from .user import User, UserRole
from .student import Student
from .course import Course
from .enrollment import Enrollment, EnrollmentStatus
from .contract_template import ContractTemplate
from .contract import Contract
from .document import Document, DocumentType, DocumentStatus, DocumentTarget

__all__ = [
    "Base",
    "Active",
    "Deleted",
    "Lifecycle",
    "User",
    "UserRole",
    "Student",
    "Course",
    "Enrollment",
    "EnrollmentStatus",
    "ContractTemplate",
    "Contract",
    "Document",
    "DocumentType",
    "DocumentStatus",
    "DocumentTarget",
]
