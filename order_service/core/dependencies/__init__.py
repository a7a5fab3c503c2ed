"""FastAPI dependencies for route handlers.

Features import their dependencies from here, not directly from ``infra``.

Usage:
    from order_service.core.dependencies import OrderEventsDep

    @router.post("/order")
    async def create_order(data: OrderRequest, events: OrderEventsDep):
        ...
"""

from order_service.core.dependencies.database import get_db_session
from order_service.core.dependencies.messaging import (
    MessagePublisherDep,
    OrderEventsDep,
    get_message_publisher,
    get_order_events,
)

__all__ = [
    "MessagePublisherDep",
    "OrderEventsDep",
    "get_db_session",
    "get_message_publisher",
    "get_order_events",
]
