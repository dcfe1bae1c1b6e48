# secretaria/routers/reenrollments.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import get_current_user
from ..core.authorization import enforce_policy
from ..core.database import get_db
from ..core.exceptions import AuthenticationError
from ..models.user import User
from ..schemas.reenrollment_schemas import ProcessAllRequest
from ..services.reenrollment_service import ReenrollmentService
from ..utils.responses import success_response

router = APIRouter(
    prefix="/reenrollments",
    tags=["Reenrollments"],
    dependencies=[Depends(enforce_policy)],
)


@router.post("/process-all", name="reenrollments:process_all")
async def process_all_reenrollments(
    payload: ProcessAllRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Move every active enrollment to pending after re-checking the admin password"""
    service = ReenrollmentService(db)
    admin_id = current_user.id

    if not await service.validate_admin_password(admin_id, payload.admin_password):
        raise AuthenticationError("Incorrect password")

    result = await service.process_global_reenrollment(payload.semester, payload.year, admin_id)
    return success_response(
        result,
        f"Global reenrollment processed: {result['totalStudents']} enrollment(s) moved to pending",
    )


@router.get("/contract-preview/{enrollment_id}", name="reenrollments:preview_contract")
async def get_contract_preview(
    enrollment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ReenrollmentService(db)
    preview = await service.get_contract_preview(enrollment_id, current_user)
    return success_response(preview)


@router.post("/accept/{enrollment_id}", name="reenrollments:accept")
async def accept_reenrollment(
    enrollment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ReenrollmentService(db)
    result = await service.accept_reenrollment(enrollment_id, current_user)
    return success_response(result, "Reenrollment accepted successfully")
