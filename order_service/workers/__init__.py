"""Queue workers, each a FastStream application around the shared broker.

Run with the CLI:
    order-service run order-worker
    order-service run payment-worker
"""

from .orders import create_order_worker
from .payments import create_payment_worker

__all__ = ["create_order_worker", "create_payment_worker"]
