"""Message publishing dependencies.

The publisher is built around the process broker, which may be None when
RabbitMQ is disabled; publishing then raises ``PublishError`` and the ingress
answers 503.

Usage:
    from order_service.core.dependencies.messaging import OrderEventsDep

    @router.post("/order")
    async def create_order(data: OrderRequest, events: OrderEventsDep):
        await events.submit(message)

Tests override :func:`get_order_events` through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from order_service.features.orders.events import OrderEvents
from order_service.infra.messaging.broker import get_broker
from order_service.infra.messaging.publisher import MessagePublisher


def get_message_publisher() -> MessagePublisher:
    """Publisher bound to the process broker."""
    return MessagePublisher(get_broker())


def get_order_events(
    publisher: Annotated[MessagePublisher, Depends(get_message_publisher)],
) -> OrderEvents:
    """Order work-message helpers bound to the process topology."""
    return OrderEvents(publisher)


MessagePublisherDep = Annotated[MessagePublisher, Depends(get_message_publisher)]
"""Publisher dependency.

Example:
    async def handler(publisher: MessagePublisherDep): ...
"""

OrderEventsDep = Annotated[OrderEvents, Depends(get_order_events)]
"""Order work-message dependency used by ``POST /order``."""


__all__ = [
    "MessagePublisherDep",
    "OrderEventsDep",
    "get_message_publisher",
    "get_order_events",
]
