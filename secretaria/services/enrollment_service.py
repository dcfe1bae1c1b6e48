# secretaria/services/enrollment_service.py
from typing import List, Optional, Union
from datetime import date
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from .base_service import BaseService
from .status_machine import INITIAL_STATUS, ensure_transition, parse_status
from ..core.config import settings
from ..core.exceptions import (
    DatabaseError, DuplicateError, NotFoundError, StateConflictError, ValidationError
)
from ..models.base import Deleted
from ..models.course import Course
from ..models.document import Document, DocumentStatus, DocumentTarget, DocumentType
from ..models.enrollment import Enrollment, EnrollmentStatus
from ..models.student import Student

logger = logging.getLogger(__name__)

REQUIRED_DOCUMENT_TARGETS = (DocumentTarget.STUDENT, DocumentTarget.BOTH)


class EnrollmentService(BaseService[Enrollment]):
    def __init__(self, db: AsyncSession):
        super().__init__(Enrollment, db)

    async def get_with_relations(self, enrollment_id: int) -> Optional[Enrollment]:
        """Enrollment with its student and course loaded"""
        stmt = self.live_select().where(self.model.id == enrollment_id).options(
            selectinload(self.model.student),
            selectinload(self.model.course),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_404(self, enrollment_id: int) -> Enrollment:
        enrollment = await self.get(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment", enrollment_id)
        return enrollment

    async def get_by_student(self, student_id: int, status: Optional[EnrollmentStatus] = None) -> List[Enrollment]:
        """Get all enrollments for a specific student, newest first"""
        stmt = self.live_select().where(self.model.student_id == student_id).options(
            selectinload(self.model.course)
        )
        if status:
            stmt = stmt.where(self.model.status == status)
        stmt = stmt.order_by(self.model.enrollment_date.desc(), self.model.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_open_enrollment(
        self, student_id: int, course_id: int, exclude_id: Optional[int] = None
    ) -> Optional[Enrollment]:
        """Non-cancelled enrollment of a student in a course, if any"""
        stmt = self.live_select().where(
            self.model.student_id == student_id,
            self.model.course_id == course_id,
            self.model.status != EnrollmentStatus.CANCELLED,
        )
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_enrollments_paginated(
        self,
        page: int = 1,
        size: int = 20,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        status: Optional[EnrollmentStatus] = None
    ) -> dict:
        return await self.get_paginated(
            page=page,
            size=size,
            order_by="enrollment_date",
            sort="desc",
            options=(selectinload(self.model.course),),
            student_id=student_id,
            course_id=course_id,
            status=status,
        )

    async def create_enrollment(
        self,
        student_id: int,
        course_id: int,
        enrollment_date: Optional[date] = None,
        current_semester: Optional[int] = None,
    ) -> Enrollment:
        """Register a student in a course; new enrollments start pending."""
        logger.info(f"Creating enrollment - student: {student_id}, course: {course_id}")

        enrollment_date = enrollment_date or date.today()
        if enrollment_date > date.today():
            raise ValidationError(
                "Invalid data",
                details=[{"field": "enrollment_date", "message": "Enrollment date cannot be in the future"}],
            )

        student = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.deleted_at.is_(None))
        )
        if not student.scalar_one_or_none():
            raise NotFoundError("Student", student_id)

        course = await self.db.execute(
            select(Course).where(Course.id == course_id, Course.deleted_at.is_(None))
        )
        if not course.scalar_one_or_none():
            raise NotFoundError("Course", course_id)

        existing = await self.get_open_enrollment(student_id, course_id)
        if existing:
            raise DuplicateError(
                f"Student already has a {existing.status.value} enrollment in this course"
            )

        try:
            enrollment = Enrollment(
                student_id=student_id,
                course_id=course_id,
                status=INITIAL_STATUS,
                enrollment_date=enrollment_date,
                current_semester=current_semester,
            )
            self.db.add(enrollment)
            await self.db.commit()
            await self.db.refresh(enrollment)
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateError("Student already has an open enrollment in this course")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error creating enrollment: {e}")
            raise DatabaseError("Error creating enrollment")

        logger.info(f"Enrollment {enrollment.id} created with status {enrollment.status.value}")
        return enrollment

    async def validate_documents(self, student_id: int) -> bool:
        """True when every required student document type has an approved document."""
        required = await self._required_document_types()
        if not required:
            return True

        approved = await self.db.execute(
            select(Document.document_type_id).where(
                Document.student_id == student_id,
                Document.status == DocumentStatus.APPROVED,
                Document.deleted_at.is_(None),
            )
        )
        approved_type_ids = set(approved.scalars().all())

        missing = [doc_type.name for doc_type in required if doc_type.id not in approved_type_ids]
        if missing:
            logger.warning(f"Student {student_id} is missing approved documents: {', '.join(missing)}")
            return False
        return True

    async def get_pending_documents(self, student_id: int) -> List[dict]:
        """Submission status of each required document type for a student"""
        required = await self._required_document_types()

        submitted = await self.db.execute(
            select(Document).where(
                Document.student_id == student_id,
                Document.deleted_at.is_(None),
            ).order_by(Document.created_at.desc(), Document.id.desc())
        )
        latest_by_type = {}
        for document in submitted.scalars().all():
            latest_by_type.setdefault(document.document_type_id, document)

        report = []
        for doc_type in required:
            document = latest_by_type.get(doc_type.id)
            report.append({
                "document_type_id": doc_type.id,
                "document_type_name": doc_type.name,
                "submitted": document is not None,
                "status": document.status.value if document else "not_submitted",
                "is_approved": bool(document and document.status == DocumentStatus.APPROVED),
            })
        return report

    async def _required_document_types(self) -> List[DocumentType]:
        result = await self.db.execute(
            select(DocumentType).where(
                DocumentType.is_required.is_(True),
                DocumentType.user_type.in_(REQUIRED_DOCUMENT_TARGETS),
                DocumentType.deleted_at.is_(None),
            ).order_by(DocumentType.id)
        )
        return list(result.scalars().all())

    async def activate_enrollment(self, enrollment_id: int) -> Enrollment:
        """Admin activation: any state may move to active.

        When ``require_document_approval_for_activation`` is enabled the
        student must have every required document approved first. Reopening
        is refused (409) while another open enrollment exists in the course.
        """
        enrollment = await self.get_or_404(enrollment_id)

        if enrollment.status == EnrollmentStatus.ACTIVE:
            logger.info(f"Enrollment {enrollment_id} is already active")
            return enrollment

        if settings.require_document_approval_for_activation:
            if not await self.validate_documents(enrollment.student_id):
                raise StateConflictError(
                    "Cannot activate enrollment: not all required documents have been approved"
                )

        # Reopening a cancelled enrollment must not create a second open one
        duplicate = await self.get_open_enrollment(
            enrollment.student_id, enrollment.course_id, exclude_id=enrollment.id
        )
        if duplicate:
            raise DuplicateError(
                f"Student already has a {duplicate.status.value} enrollment in this course"
            )

        previous = enrollment.status
        enrollment.status = EnrollmentStatus.ACTIVE
        await self._commit(enrollment, "Error activating enrollment")
        logger.info(f"Enrollment {enrollment_id} activated (previous status: {previous.value})")
        return enrollment

    async def update_status(self, enrollment_id: int, new_status: Union[str, EnrollmentStatus]) -> Enrollment:
        """Update enrollment status"""
        target = parse_status(new_status)
        logger.info(f"Updating enrollment {enrollment_id} status to {target.value}")

        if target == EnrollmentStatus.ACTIVE:
            return await self.activate_enrollment(enrollment_id)

        enrollment = await self.get_or_404(enrollment_id)
        if enrollment.status == target:
            return enrollment

        ensure_transition(enrollment.status, target)
        enrollment.status = target
        await self._commit(enrollment, "Error updating enrollment status")
        logger.info(f"Enrollment {enrollment_id} status updated to {target.value}")
        return enrollment

    async def update_current_semester(self, enrollment_id: int, current_semester: int) -> Enrollment:
        if current_semester is None or not 0 <= current_semester <= 12:
            raise ValidationError(
                "Invalid data",
                details=[{"field": "current_semester", "message": "Semester must be a number between 0 and 12"}],
            )

        enrollment = await self.get_or_404(enrollment_id)
        enrollment.current_semester = current_semester
        await self._commit(enrollment, "Error updating enrollment semester")
        logger.info(f"Enrollment {enrollment_id} current semester set to {current_semester}")
        return enrollment

    async def delete_enrollment(self, enrollment_id: int) -> Deleted:
        """Cancel and soft delete; the row is kept for history."""
        enrollment = await self.get_or_404(enrollment_id)
        enrollment.status = EnrollmentStatus.CANCELLED
        try:
            state = await self.soft_delete(enrollment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error deleting enrollment {enrollment_id}: {e}")
            raise DatabaseError("Error deleting enrollment")

        logger.info(f"Enrollment {enrollment_id} cancelled and deleted at {state.at.isoformat()}")
        return state

    async def _commit(self, enrollment: Enrollment, error_message: str) -> None:
        try:
            await self.db.commit()
            await self.db.refresh(enrollment)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"{error_message}: {e}")
            raise DuplicateError("Student already has an open enrollment in this course")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{error_message}: {e}")
            raise DatabaseError(error_message)
