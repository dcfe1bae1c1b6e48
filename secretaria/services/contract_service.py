# secretaria/services/contract_service.py
from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from .base_service import BaseService
from ..core.exceptions import DatabaseError, NotFoundError, PermissionDenied, StateConflictError
from ..models.base import utcnow
from ..models.contract import Contract
from ..models.user import User

logger = logging.getLogger(__name__)


class ContractService(BaseService[Contract]):
    def __init__(self, db: AsyncSession):
        super().__init__(Contract, db)

    async def get_by_user(self, user_id: int, accepted: Optional[bool] = None) -> List[Contract]:
        """Contracts owned by a user; ``accepted`` narrows to accepted or pending ones"""
        stmt = self.live_select().where(self.model.user_id == user_id)
        if accepted is True:
            stmt = stmt.where(self.model.accepted_at.is_not(None))
        elif accepted is False:
            stmt = stmt.where(self.model.accepted_at.is_(None))
        stmt = stmt.order_by(self.model.created_at.desc(), self.model.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_contracts_paginated(
        self,
        page: int = 1,
        size: int = 20,
        user_id: Optional[int] = None,
        semester: Optional[int] = None,
        year: Optional[int] = None,
    ) -> dict:
        return await self.get_paginated(
            page=page,
            size=size,
            order_by="created_at",
            sort="desc",
            user_id=user_id,
            semester=semester,
            year=year,
        )

    async def get_for_user(self, contract_id: int, user: User) -> Contract:
        """Admins see any contract, everyone else only their own"""
        contract = await self.get(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        if not user.is_admin and contract.user_id != user.id:
            logger.warning(f"User {user.id} tried to access contract {contract_id} owned by {contract.user_id}")
            raise PermissionDenied("You do not have permission to view this contract")
        return contract

    async def accept_contract(self, contract_id: int, user: User) -> Contract:
        """Record the owner's acceptance; ``accepted_at`` is written only once."""
        logger.info(f"Accepting contract {contract_id} - user {user.id}")

        contract = await self.get(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        if contract.user_id != user.id:
            logger.warning(f"User {user.id} is not the owner of contract {contract_id}")
            raise PermissionDenied("You do not have permission to accept this contract")
        if contract.is_accepted:
            raise StateConflictError("This contract has already been accepted")

        contract.accepted_at = utcnow()
        try:
            await self.db.commit()
            await self.db.refresh(contract)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error accepting contract {contract_id}: {e}")
            raise DatabaseError("Error accepting contract")

        logger.info(f"Contract {contract_id} accepted at {contract.accepted_at.isoformat()}")
        return contract
