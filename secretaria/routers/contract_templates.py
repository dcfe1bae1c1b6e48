# secretaria/routers/contract_templates.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.authorization import enforce_policy
from ..core.database import get_db
from ..services.contract_template_service import ContractTemplateService
from ..utils.responses import isoformat, success_response
from ..utils.templating import RECOGNIZED_TOKENS

router = APIRouter(
    prefix="/contract-templates",
    tags=["Contract Templates"],
    dependencies=[Depends(enforce_policy)],
)


@router.get("", name="contract_templates:list")
async def list_templates(db: AsyncSession = Depends(get_db)):
    """Active templates; the first one is used for reenrollment contracts"""
    service = ContractTemplateService(db)
    templates = await service.get_available()
    return success_response([
        {
            "id": template.id,
            "name": template.name,
            "is_active": template.is_active,
            "created_at": isoformat(template.created_at),
        }
        for template in templates
    ])


@router.get("/{template_id}/placeholders", name="contract_templates:placeholders")
async def get_template_placeholders(template_id: int, db: AsyncSession = Depends(get_db)):
    service = ContractTemplateService(db)
    placeholders = await service.get_placeholders(template_id)
    return success_response({
        "template_id": template_id,
        "placeholders": placeholders,
        "unrecognized": [p for p in placeholders if p not in RECOGNIZED_TOKENS],
    })
