"""Orders feature package."""

from .models import Order, OrderStatus
from .repository import OrderRepository, get_order_repository
from .schemas import OrderCreatedMessage, OrderRequest

__all__ = [
    "Order",
    "OrderCreatedMessage",
    "OrderRepository",
    "OrderRequest",
    "OrderStatus",
    "get_order_repository",
]
