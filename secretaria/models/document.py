# secretaria/models/document.py
import enum

from sqlalchemy import Column, String, Integer, Boolean, Enum, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class DocumentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentTarget(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    BOTH = "both"


class DocumentType(Base):
    __tablename__ = "document_types"

    name = Column(String(100), nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)
    user_type = Column(
        Enum(DocumentTarget, name="document_target", native_enum=False, length=20,
             values_callable=lambda targets: [t.value for t in targets]),
        default=DocumentTarget.STUDENT,
        nullable=False,
    )

    documents = relationship("Document", back_populates="document_type")


class Document(Base):
    __tablename__ = "documents"

    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    document_type_id = Column(Integer, ForeignKey("document_types.id"), nullable=False, index=True)
    status = Column(
        Enum(DocumentStatus, name="document_status", native_enum=False, length=20,
             values_callable=lambda statuses: [s.value for s in statuses]),
        default=DocumentStatus.PENDING,
        nullable=False,
    )
    file_path = Column(String(255), nullable=True)

    student = relationship("Student", back_populates="documents")
    document_type = relationship("DocumentType", back_populates="documents")
