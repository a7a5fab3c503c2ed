"""Repository for the orders feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from order_service.core.database import BaseRepository
from order_service.features.orders.models import Order

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class OrderRepository(BaseRepository[Order]):
    """Repository for Order.

    Inherits from BaseRepository:
        - get(session, id) -> Order | None
        - create(session, instance) -> Order

    Feature-specific methods below.
    """

    def __init__(self) -> None:
        super().__init__(Order)

    async def get_for_update(self, session: AsyncSession, order_id: str) -> Order | None:
        """Load an order and lock its row until the transaction ends."""
        result = await session.execute(
            select(Order).where(Order.id == order_id).with_for_update()
        )
        return result.scalars().first()


_order_repository: OrderRepository | None = None


def get_order_repository() -> OrderRepository:
    """Get OrderRepository instance.

    Usage in FastAPI routes:
        repo: OrderRepository = Depends(get_order_repository)
    """
    global _order_repository
    if _order_repository is None:
        _order_repository = OrderRepository()
    return _order_repository
