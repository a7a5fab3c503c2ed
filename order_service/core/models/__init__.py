"""Database models package.

Imports every mapped class so ``Base.metadata`` is complete for Alembic and
for ``create_all`` in tests.
"""

from __future__ import annotations

from order_service.features.dead_letters.models import DeadLetterRecord
from order_service.features.orders.models import Order, OrderStatus
from order_service.features.payments.models import Payment

__all__ = [
    "DeadLetterRecord",
    "Order",
    "OrderStatus",
    "Payment",
]
