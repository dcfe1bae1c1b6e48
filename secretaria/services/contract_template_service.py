# secretaria/services/contract_template_service.py
from typing import Any, List, Mapping, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.exceptions import NotFoundError, StateConflictError
from ..models.contract_template import ContractTemplate
from ..utils.templating import extract_placeholders, render_placeholders

logger = logging.getLogger(__name__)


class ContractTemplateService(BaseService[ContractTemplate]):
    def __init__(self, db: AsyncSession):
        super().__init__(ContractTemplate, db)

    async def get_available(self) -> List[ContractTemplate]:
        """Active, non-deleted templates ordered by name"""
        stmt = self.live_select().where(self.model.is_active.is_(True)).order_by(
            self.model.name.asc(), self.model.id.asc()
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_first_available(self) -> Optional[ContractTemplate]:
        templates = await self.get_available()
        return templates[0] if templates else None

    async def require_first_available(self) -> ContractTemplate:
        template = await self.get_first_available()
        if not template:
            logger.warning("No active contract template available")
            raise StateConflictError(
                "No contract template available. Please contact the administration."
            )
        return template

    async def get_placeholders(self, template_id: int) -> List[str]:
        template = await self.get(template_id)
        if not template:
            raise NotFoundError("Contract template", template_id)
        return extract_placeholders(template.content)

    @staticmethod
    def render(template: ContractTemplate, data: Mapping[str, Any]) -> str:
        return render_placeholders(template.content, data)
