"""Payment-request consumer wiring."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from order_service.core.settings import WorkflowSettings, get_workflow_settings
from order_service.features.payments.decision import PaymentDecisionHandler
from order_service.infra.messaging.consumer import DeadLetterSink, RetryAwareConsumer
from order_service.infra.messaging.exceptions import MalformedMessageError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from order_service.features.payments.gateway import PaymentGateway
    from order_service.infra.messaging.topology import Topology

MAX_ORDER_ID_LENGTH = 36


def decode_payment_request(body: bytes) -> str:
    """Parse a payment-request body: the order id as a JSON string.

    Raises:
        MalformedMessageError: If the body is not a non-empty JSON string.
    """
    try:
        order_id = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise MalformedMessageError(f"not JSON: {e}") from e

    if not isinstance(order_id, str) or not order_id.strip():
        raise MalformedMessageError(f"expected an order id string, got {type(order_id).__name__}")
    if len(order_id) > MAX_ORDER_ID_LENGTH:
        raise MalformedMessageError("order id too long")
    return order_id


def build_payment_consumer(
    *,
    session_factory: async_sessionmaker[AsyncSession],
    gateway: PaymentGateway,
    recorder: DeadLetterSink,
    topology: Topology,
    settings: WorkflowSettings | None = None,
) -> RetryAwareConsumer[str]:
    """Wire the retry-aware consumer for the payment queue."""
    settings = settings or get_workflow_settings()
    decision = PaymentDecisionHandler(session_factory, gateway)
    return RetryAwareConsumer(
        queue=topology.payment_queue.name,
        service_name=settings.payment_service_name,
        decode=decode_payment_request,
        handler=decision.handle,
        recorder=recorder,
        max_retries=settings.max_retries,
        work_item_id=lambda order_id: order_id,
    )


__all__ = ["build_payment_consumer", "decode_payment_request"]
