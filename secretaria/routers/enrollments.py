# secretaria/routers/enrollments.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import get_current_user
from ..core.authorization import enforce_policy
from ..core.database import get_db
from ..core.exceptions import NotFoundError, PermissionDenied
from ..models.enrollment import Enrollment, EnrollmentStatus
from ..models.user import User
from ..schemas.enrollment_schemas import CurrentSemesterUpdate, EnrollmentCreate, EnrollmentStatusUpdate
from ..services.enrollment_service import EnrollmentService
from ..services.status_machine import parse_status
from ..utils.pagination import PaginationParams, Paginator
from ..utils.responses import is_loaded, isoformat, success_response

router = APIRouter(
    prefix="/enrollments",
    tags=["Enrollments"],
    dependencies=[Depends(enforce_policy)],
)


def format_enrollment(enrollment: Enrollment) -> dict:
    data = {
        "id": enrollment.id,
        "student_id": enrollment.student_id,
        "course_id": enrollment.course_id,
        "status": enrollment.status.value,
        "enrollment_date": isoformat(enrollment.enrollment_date),
        "current_semester": enrollment.current_semester,
        "created_at": isoformat(enrollment.created_at),
        "updated_at": isoformat(enrollment.updated_at),
    }
    if is_loaded(enrollment, "course") and enrollment.course:
        data["course"] = {
            "id": enrollment.course.id,
            "name": enrollment.course.name,
            "duration_semesters": enrollment.course.duration_semesters,
        }
    if is_loaded(enrollment, "student") and enrollment.student:
        data["student"] = {
            "id": enrollment.student.id,
            "name": enrollment.student.name,
            "registration_number": enrollment.student.registration_number,
        }
    return data


@router.get("", name="enrollments:list")
async def list_enrollments(
    status: Optional[str] = Query(None, description="Filter by status"),
    student_id: Optional[int] = Query(None, gt=0),
    course_id: Optional[int] = Query(None, gt=0),
    pagination: PaginationParams = Depends(Paginator.get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    """Paginated enrollments with optional filters"""
    service = EnrollmentService(db)
    result = await service.get_enrollments_paginated(
        page=pagination.page,
        size=pagination.size,
        student_id=student_id,
        course_id=course_id,
        status=parse_status(status) if status else None,
    )
    return success_response(
        Paginator.create_response(
            [format_enrollment(e) for e in result["items"]],
            result["page"],
            result["size"],
            result["total"],
        )
    )


@router.post("", name="enrollments:create", status_code=201)
async def create_enrollment(
    payload: EnrollmentCreate,
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment = await service.create_enrollment(
        student_id=payload.student_id,
        course_id=payload.course_id,
        enrollment_date=payload.enrollment_date,
        current_semester=payload.current_semester,
    )
    return success_response(format_enrollment(enrollment), "Enrollment created successfully")


@router.get("/me", name="enrollments:mine")
async def get_my_enrollments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Enrollments of the student profile linked to the caller"""
    if current_user.student_id is None:
        raise PermissionDenied("Your account is not linked to a student profile")

    service = EnrollmentService(db)
    enrollments = await service.get_by_student(current_user.student_id)
    return success_response([format_enrollment(e) for e in enrollments])


@router.get("/{enrollment_id}", name="enrollments:read")
async def get_enrollment(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment = await service.get_with_relations(enrollment_id)
    if not enrollment:
        raise NotFoundError("Enrollment", enrollment_id)
    return success_response(format_enrollment(enrollment))


@router.put("/{enrollment_id}/status", name="enrollments:update_status")
async def update_enrollment_status(
    enrollment_id: int,
    payload: EnrollmentStatusUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Activation is unconditional by default; other targets follow the status machine"""
    service = EnrollmentService(db)
    enrollment = await service.update_status(enrollment_id, payload.status)
    return success_response(format_enrollment(enrollment), "Enrollment status updated successfully")


@router.put("/{enrollment_id}/current-semester", name="enrollments:update_semester")
async def update_current_semester(
    enrollment_id: int,
    payload: CurrentSemesterUpdate,
    db: AsyncSession = Depends(get_db)
):
    service = EnrollmentService(db)
    enrollment = await service.update_current_semester(enrollment_id, payload.current_semester)
    return success_response(format_enrollment(enrollment), "Current semester updated successfully")


@router.delete("/{enrollment_id}", name="enrollments:delete")
async def delete_enrollment(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Cancels the enrollment and hides it from every listing"""
    service = EnrollmentService(db)
    state = await service.delete_enrollment(enrollment_id)
    return success_response(
        {"id": enrollment_id, "status": EnrollmentStatus.CANCELLED.value, "deleted_at": isoformat(state.at)},
        "Enrollment deleted successfully",
    )


@router.get("/{enrollment_id}/pending-documents", name="enrollments:pending_documents")
async def get_pending_documents(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Required documents of the enrolled student and their review status"""
    service = EnrollmentService(db)
    enrollment = await service.get_or_404(enrollment_id)
    documents = await service.get_pending_documents(enrollment.student_id)
    return success_response({
        "enrollment_id": enrollment.id,
        "student_id": enrollment.student_id,
        "documents": documents,
        "all_approved": all(d["is_approved"] for d in documents),
    })
