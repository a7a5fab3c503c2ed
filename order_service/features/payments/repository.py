"""Repository for the payments feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from order_service.core.database import BaseRepository
from order_service.features.payments.models import Payment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment."""

    def __init__(self) -> None:
        super().__init__(Payment)

    async def list_for_order(self, session: AsyncSession, order_id: str) -> Sequence[Payment]:
        result = await session.execute(select(Payment).where(Payment.order_id == order_id))
        return result.scalars().all()


_payment_repository: PaymentRepository | None = None


def get_payment_repository() -> PaymentRepository:
    """Get PaymentRepository instance."""
    global _payment_repository
    if _payment_repository is None:
        _payment_repository = PaymentRepository()
    return _payment_repository
