# secretaria/services/reenrollment_service.py
"""Global reenrollment (semester rollover).

Phase one, run by an administrator, moves every active enrollment to
pending in a single transaction. Phase two happens per student: the student
previews the contract rendered from the active template and accepts it,
which reactivates the enrollment and records a contract without a PDF.
Contracts are only created in phase two.
"""
from typing import Any, Dict, List
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from .contract_template_service import ContractTemplateService
from ..core.config import settings
from ..core.exceptions import DatabaseError, NotFoundError, PermissionDenied, StateConflictError
from ..core.security import verify_password
from ..models.base import utcnow
from ..models.contract import Contract
from ..models.enrollment import Enrollment, EnrollmentStatus
from ..models.user import User, UserRole
from ..utils.templating import build_contract_data, current_period, local_now

logger = logging.getLogger(__name__)


class ReenrollmentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.templates = ContractTemplateService(db)

    async def validate_admin_password(self, user_id: int, password: str) -> bool:
        """Fresh proof of the admin's credential before a bulk operation.

        Raises 404 for an unknown user and 403 for any non-admin role, so a
        student or teacher password can never unlock the operation. Returns
        the result of the hash comparison; the caller turns ``False`` into 401.
        """
        logger.info(f"Validating admin password - user {user_id}")

        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        user = result.scalar_one_or_none()
        if not user:
            logger.warning(f"Password validation for unknown user {user_id}")
            raise NotFoundError("User", user_id)

        if user.role != UserRole.ADMIN:
            logger.warning(f"Global reenrollment attempted by non-admin user {user_id} (role: {user.role.value})")
            raise PermissionDenied("Only administrators can run the global reenrollment")

        is_valid = await run_in_threadpool(verify_password, password, user.password_hash)
        if is_valid:
            logger.info(f"Admin password validated - user {user_id}")
        else:
            logger.warning(f"Incorrect password for admin {user_id}")
        return is_valid

    async def process_global_reenrollment(self, semester: int, year: int, admin_user_id: int) -> Dict[str, Any]:
        """Move every active enrollment in the system to pending, atomically.

        Not scoped to a course. Returns the affected count and ids; on any
        database error the whole batch is rolled back.
        """
        logger.info(
            f"Starting global reenrollment - semester {semester}, year {year}, admin {admin_user_id}"
        )

        stmt = (
            update(Enrollment)
            .where(
                Enrollment.status == EnrollmentStatus.ACTIVE,
                Enrollment.deleted_at.is_(None),
            )
            .values(status=EnrollmentStatus.PENDING)
            .returning(Enrollment.id)
        )

        try:
            result = await self.db.execute(stmt)
            affected_ids: List[int] = sorted(result.scalars().all())
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Global reenrollment rolled back - admin_id={admin_user_id} "
                f"semester={semester} year={year} error={e}"
            )
            raise DatabaseError("Error processing global reenrollment. Operation cancelled.")

        logger.info(
            f"Global reenrollment processed - admin_id={admin_user_id} "
            f"total_affected={len(affected_ids)} semester={semester} year={year} "
            f"affected_enrollment_ids={affected_ids}"
        )
        return {
            "totalStudents": len(affected_ids),
            "affectedEnrollmentIds": affected_ids,
        }

    async def _get_owned_enrollment(
        self,
        enrollment_id: int,
        user: User,
        with_relations: bool = False,
        lock: bool = False,
    ) -> Enrollment:
        stmt = select(Enrollment).where(
            Enrollment.id == enrollment_id,
            Enrollment.deleted_at.is_(None),
        )
        if with_relations:
            stmt = stmt.options(selectinload(Enrollment.student), selectinload(Enrollment.course))
        if lock:
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        enrollment = result.scalar_one_or_none()
        if not enrollment:
            raise NotFoundError("Enrollment", enrollment_id)

        # Ownership goes through the student profile linked to the login
        if user.student_id is None or user.student_id != enrollment.student_id:
            logger.warning(
                f"User {user.id} tried to access enrollment {enrollment_id} of student {enrollment.student_id}"
            )
            raise PermissionDenied("You do not have permission to access this enrollment")
        return enrollment

    @staticmethod
    def _ensure_pending(enrollment: Enrollment) -> None:
        if enrollment.status != EnrollmentStatus.PENDING:
            raise StateConflictError(
                f"This enrollment is not awaiting acceptance (current status: {enrollment.status.value})"
            )

    async def get_contract_preview(self, enrollment_id: int, user: User) -> Dict[str, Any]:
        """Render the reenrollment contract as HTML; nothing is stored."""
        logger.info(f"Building contract preview - enrollment {enrollment_id}, user {user.id}")

        enrollment = await self._get_owned_enrollment(enrollment_id, user, with_relations=True)
        self._ensure_pending(enrollment)

        template = await self.templates.require_first_available()
        now = local_now(settings.institution_timezone)
        semester, year = current_period(now.date())
        data = build_contract_data(enrollment, semester, year, settings.institution_name, now=now)

        return {
            "contractHTML": self.templates.render(template, data),
            "enrollmentId": enrollment.id,
            "semester": semester,
            "year": year,
        }

    async def accept_reenrollment(self, enrollment_id: int, user: User) -> Dict[str, Any]:
        """Student accepts: pending -> active plus a contract with no file."""
        logger.info(f"Accepting reenrollment - enrollment {enrollment_id}, user {user.id}")
        user_id = user.id

        enrollment = await self._get_owned_enrollment(enrollment_id, user, lock=True)
        self._ensure_pending(enrollment)

        template = await self.templates.get_first_available()
        semester, year = current_period(local_now(settings.institution_timezone).date())

        try:
            enrollment.status = EnrollmentStatus.ACTIVE
            contract = Contract(
                user_id=user_id,
                enrollment_id=enrollment.id,
                template_id=template.id if template else None,
                file_path=None,
                file_name=None,
                semester=semester,
                year=year,
                accepted_at=utcnow(),
            )
            self.db.add(contract)
            await self.db.commit()
            await self.db.refresh(contract)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Reenrollment acceptance rolled back - enrollment {enrollment_id}: {e}")
            raise DatabaseError("Error accepting reenrollment. Please try again later.")

        logger.info(
            f"Reenrollment accepted - enrollment_id={enrollment_id} user_id={user_id} "
            f"contract_id={contract.id} semester={semester} year={year}"
        )
        return {
            "enrollmentId": enrollment_id,
            "status": EnrollmentStatus.ACTIVE.value,
            "contractId": contract.id,
            "semester": semester,
            "year": year,
            "acceptedAt": contract.accepted_at.isoformat(),
        }
