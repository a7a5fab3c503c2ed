"""Minimal generic repository for SQLAlchemy models.

Lookup by primary key and insert, with explicit session passing. Feature
repositories add their own queries on top.

Example:
    class PaymentRepository(BaseRepository[Payment]):
        async def list_for_order(self, session: AsyncSession, order_id: str):
            result = await session.execute(select(Payment).where(Payment.order_id == order_id))
            return result.scalars().all()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository[T]:
    """Generic repository with explicit session passing.

    Methods never commit; the caller owns the transaction boundary so several
    repository calls can be grouped into one unit of work.
    """

    __slots__ = ("_logger", "model")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key, or None."""
        instance = await session.get(self.model, id)
        self._logger.debug(
            "db.get: %s(%s) -> %s",
            self.model.__name__,
            id,
            "found" if instance else "not found",
        )
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add a new entity and flush so generated values are populated."""
        session.add(instance)
        await session.flush()
        await session.refresh(instance)

        self._logger.debug(
            "db.create: %s(id=%s)", self.model.__name__, getattr(instance, "id", None)
        )
        return instance
