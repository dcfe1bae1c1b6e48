from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import as_declarative, declared_attr
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import DateTime, Integer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Active:
    """Row is visible to regular queries."""


@dataclass(frozen=True)
class Deleted:
    """Row was logically removed at ``at``; it is never physically erased."""
    at: datetime


Lifecycle = Union[Active, Deleted]


@as_declarative()
class Base:
    __abstract__ = True  # Prevents creating a table for the base class

    id: Mapped[int]

    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    id = mapped_column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Soft delete: null while the row is alive
    deleted_at = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def lifecycle(self) -> Lifecycle:
        if self.deleted_at is None:
            return Active()
        return Deleted(at=self.deleted_at)

    def mark_deleted(self, at: Optional[datetime] = None) -> Deleted:
        self.deleted_at = at or utcnow()
        return Deleted(at=self.deleted_at)
