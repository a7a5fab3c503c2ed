"""Exchange, queue and routing key naming conventions.

Every name is namespaced with ``RABBIT_QUEUE_PREFIX`` so several environments
can share one broker.
"""

from __future__ import annotations

from dataclasses import dataclass

from order_service.core.settings import RabbitSettings, get_rabbit_settings

ORDER_ROUTING_KEY = "order.create"
PAYMENT_ROUTING_KEY = "payment.request"
RETRY_ROUTING_KEY = "payment.retry"


@dataclass(frozen=True, slots=True)
class TopologyNames:
    """Literal broker names for one deployment."""

    order_exchange: str
    payment_exchange: str
    retry_exchange: str
    order_queue: str
    payment_queue: str
    retry_queue: str
    order_routing_key: str = ORDER_ROUTING_KEY
    payment_routing_key: str = PAYMENT_ROUTING_KEY
    retry_routing_key: str = RETRY_ROUTING_KEY

    @classmethod
    def from_settings(cls, settings: RabbitSettings | None = None) -> TopologyNames:
        """Derive names from the configured prefix.

        Example:
            >>> names = TopologyNames.from_settings(RabbitSettings(queue_prefix="shop"))
            >>> names.payment_queue
            'shop.payment-queue'
        """
        settings = settings or get_rabbit_settings()
        prefixed = settings.get_prefixed_name
        return cls(
            order_exchange=prefixed("orders"),
            payment_exchange=prefixed("payments"),
            retry_exchange=prefixed("retry"),
            order_queue=prefixed("order-queue"),
            payment_queue=prefixed("payment-queue"),
            retry_queue=prefixed("retry-queue"),
        )
