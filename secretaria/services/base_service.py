# secretaria/services/base_service.py
"""Base service with common CRUD operations."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, func
from typing import Type, Any, Dict, Optional, TypeVar, Generic

from ..models.base import Deleted, utcnow

# Define generic type
T = TypeVar('T')

class BaseService(Generic[T]):
    def __init__(self, model: Type[T], db: AsyncSession):
        self.model = model
        self.db = db

    def live_select(self, *entities, include_deleted: bool = False) -> Select:
        """Entry point for every read: soft-deleted rows are hidden unless asked for."""
        stmt = select(*entities) if entities else select(self.model)
        if not include_deleted:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return stmt

    def _apply_filters(self, stmt: Select, filters: Dict[str, Any]) -> Select:
        for key, value in filters.items():
            if hasattr(self.model, key) and value is not None:
                stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    async def get(self, id: Any, include_deleted: bool = False) -> Optional[T]:
        stmt = self.live_select(include_deleted=include_deleted).where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_paginated(
        self,
        page: int = 1,
        size: int = 20,
        include_deleted: bool = False,
        order_by: str = None,
        sort: str = "asc",
        options: tuple = (),
        **filters
    ):
        """Get paginated results with optional soft delete filtering"""
        offset = (page - 1) * size

        stmt = self._apply_filters(self.live_select(include_deleted=include_deleted), filters)
        count_stmt = self._apply_filters(
            self.live_select(func.count(self.model.id), include_deleted=include_deleted),
            filters,
        )

        count_result = await self.db.execute(count_stmt)
        total = count_result.scalar()

        order_field = getattr(self.model, order_by) if order_by and hasattr(self.model, order_by) else self.model.id
        stmt = stmt.order_by(order_field.desc() if sort.lower() == "desc" else order_field.asc())

        stmt = stmt.options(*options).offset(offset).limit(size)
        result = await self.db.execute(stmt)
        items = list(result.scalars().all())

        return {
            "items": items,
            "total": total,
            "page": page,
            "size": size,
        }

    async def soft_delete(self, obj: T) -> Deleted:
        """Stamp ``deleted_at``; the row is kept and drops out of ``live_select``."""
        state = obj.mark_deleted(utcnow())
        await self.db.commit()
        return state
