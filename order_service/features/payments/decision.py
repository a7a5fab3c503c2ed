"""Payment decision for one delivery of a payment request.

Given an order id and the attempt number derived from the broker's death
count, decide the outcome:

- order row not visible yet -> transient (the order worker may still be
  committing it; the retry loop waits for it)
- order cancelled            -> permanent
- order already purchased    -> success, without a second payment row
- gateway declines           -> transient
- gateway approves           -> payment row + order marked purchased, in one
  transaction
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from order_service.features.orders.models import OrderStatus
from order_service.features.orders.repository import OrderRepository, get_order_repository
from order_service.features.payments.models import Payment
from order_service.features.payments.repository import (
    PaymentRepository,
    get_payment_repository,
)
from order_service.infra.messaging.outcomes import (
    HandlerResult,
    PermanentFailure,
    Success,
    TransientFailure,
)
from order_service.infra.metrics.tracking import track_payment_decision

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from order_service.features.payments.gateway import PaymentGateway
    from order_service.infra.messaging.headers import DeliveryMetadata

logger = logging.getLogger(__name__)

ORDER_NOT_VISIBLE = "order not yet visible"


class PaymentDecisionHandler:
    """Decides and records the payment for an order.

    Each call opens its own sessions, so concurrent deliveries never share
    database state.

    Example:
        handler = PaymentDecisionHandler(AsyncSessionLocal, ScenarioGateway())
        result = await handler.decide(order_id, attempt_number=1)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: PaymentGateway,
        *,
        orders: OrderRepository | None = None,
        payments: PaymentRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._gateway = gateway
        self._orders = orders or get_order_repository()
        self._payments = payments or get_payment_repository()

    async def handle(self, order_id: str, metadata: DeliveryMetadata) -> HandlerResult:
        """Consumer entry point."""
        result = await self.decide(order_id, metadata.attempt_number)
        track_payment_decision(type(result).__name__)
        return result

    async def decide(self, order_id: str, attempt_number: int) -> HandlerResult:
        async with self._session_factory() as session:
            order = await self._orders.get(session, order_id)
            if order is None:
                logger.info("Order not visible yet", extra={"order_id": order_id})
                return TransientFailure(ORDER_NOT_VISIBLE)
            status = order.status

        if status is OrderStatus.CANCELLED:
            return PermanentFailure("order cancelled")
        if status is OrderStatus.PURCHASED:
            logger.info("Order already purchased", extra={"order_id": order_id})
            return Success()

        charge = await self._gateway.charge(order_id, attempt_number)
        if not charge.approved:
            logger.warning(
                "Payment declined",
                extra={"order_id": order_id, "attempt": attempt_number, "reason": charge.reason},
            )
            return TransientFailure(charge.reason or "payment declined")

        return await self._record_payment(order_id, attempt_number)

    async def _record_payment(self, order_id: str, attempt_number: int) -> HandlerResult:
        async with self._session_factory() as session, session.begin():
            order = await self._orders.get_for_update(session, order_id)
            if order is None:
                return TransientFailure(ORDER_NOT_VISIBLE)
            # Another delivery may have settled the order while the gateway ran.
            if order.status is OrderStatus.PURCHASED:
                return Success()
            if order.status is OrderStatus.CANCELLED:
                return PermanentFailure("order cancelled")

            payment = await self._payments.create(session, Payment(order_id=order_id))
            order.status = OrderStatus.PURCHASED

        logger.info(
            "Payment recorded",
            extra={"order_id": order_id, "payment_id": payment.id, "attempt": attempt_number},
        )
        return Success()


__all__ = ["ORDER_NOT_VISIBLE", "PaymentDecisionHandler"]
