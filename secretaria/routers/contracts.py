# secretaria/routers/contracts.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import get_current_user
from ..core.authorization import enforce_policy
from ..core.database import get_db
from ..models.contract import Contract
from ..models.user import User
from ..schemas.contract_schemas import ContractStatusFilter
from ..services.contract_service import ContractService
from ..utils.pagination import PaginationParams, Paginator
from ..utils.responses import isoformat, success_response

router = APIRouter(
    prefix="/contracts",
    tags=["Contracts"],
    dependencies=[Depends(enforce_policy)],
)


def format_contract(contract: Contract) -> dict:
    return {
        "id": contract.id,
        "user_id": contract.user_id,
        "enrollment_id": contract.enrollment_id,
        "template_id": contract.template_id,
        "semester": contract.semester,
        "year": contract.year,
        "period": contract.period_label,
        "file_name": contract.file_name,
        "has_pdf": contract.has_pdf,
        "contract_type": contract.contract_type,
        "status": "accepted" if contract.is_accepted else "pending",
        "accepted_at": isoformat(contract.accepted_at),
        "created_at": isoformat(contract.created_at),
    }


@router.get("", name="contracts:list")
async def list_contracts(
    user_id: Optional[int] = Query(None, gt=0),
    semester: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2020, le=2100),
    pagination: PaginationParams = Depends(Paginator.get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    service = ContractService(db)
    result = await service.get_contracts_paginated(
        page=pagination.page,
        size=pagination.size,
        user_id=user_id,
        semester=semester,
        year=year,
    )
    return success_response(
        Paginator.create_response(
            [format_contract(c) for c in result["items"]],
            result["page"],
            result["size"],
            result["total"],
        )
    )


@router.get("/me", name="contracts:mine")
async def get_my_contracts(
    status: Optional[ContractStatusFilter] = Query(None, description="pending or accepted"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ContractService(db)
    contracts = await service.get_by_user(
        current_user.id,
        accepted=status.accepted if status else None,
    )
    return success_response([format_contract(c) for c in contracts])


@router.get("/{contract_id}", name="contracts:read")
async def get_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ContractService(db)
    contract = await service.get_for_user(contract_id, current_user)
    return success_response(format_contract(contract))


@router.post("/{contract_id}/accept", name="contracts:accept")
async def accept_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = ContractService(db)
    contract = await service.accept_contract(contract_id, current_user)
    return success_response(format_contract(contract), "Contract accepted successfully")
