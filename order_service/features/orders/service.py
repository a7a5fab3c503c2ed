"""Service layer for order persistence."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from order_service.features.orders.models import Order, OrderStatus
from order_service.features.orders.repository import OrderRepository, get_order_repository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from order_service.features.orders.schemas import OrderCreatedMessage

logger = logging.getLogger(__name__)


class OrderService:
    """Creates orders from order-creation messages.

    Each call runs in its own session and transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: OrderRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository or get_order_repository()

    async def create_order(self, message: OrderCreatedMessage) -> bool:
        """Insert a pending order; returns False if the id already exists.

        Duplicate deliveries of the same message are no-ops.

        Raises:
            SQLAlchemyError: On datastore failures other than the duplicate id.
        """
        async with self._session_factory() as session:
            existing = await self._repository.get(session, message.id)
            if existing is not None:
                logger.info(
                    "Order already stored, skipping duplicate",
                    extra={"order_id": message.id, "status": existing.status.value},
                )
                return False

            order = Order(
                id=message.id,
                user_id=message.user_id,
                product_id=message.product_id,
                quantity=message.quantity,
                location=message.location,
                status=OrderStatus.PENDING,
            )
            try:
                await self._repository.create(session, order)
                await session.commit()
            except IntegrityError:
                # A concurrent delivery of the same message won the insert.
                await session.rollback()
                if await self._repository.get(session, message.id) is None:
                    raise
                logger.info("Order inserted concurrently", extra={"order_id": message.id})
                return False

        logger.info(
            "Order created",
            extra={
                "order_id": message.id,
                "user_id": message.user_id,
                "product_id": message.product_id,
                "quantity": message.quantity,
            },
        )
        return True


__all__ = ["OrderService"]
