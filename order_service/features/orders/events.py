"""Work messages published by the orders feature.

Two messages leave the ingress for every accepted order, both carrying the
order id as correlation id:

- ``order.create`` on the order exchange: the full :class:`OrderCreatedMessage`.
- ``payment.request`` on the payment exchange: the order id as a JSON string.

The payment request is only published once the order-creation publish is
confirmed. The payment worker still treats a not-yet-visible order as a
transient failure, because confirmation says nothing about when the order
worker commits the row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from order_service.infra.messaging.topology import Topology, get_topology

if TYPE_CHECKING:
    from order_service.features.orders.schemas import OrderCreatedMessage
    from order_service.infra.messaging.publisher import MessagePublisher, PublishReceipt


class OrderEvents:
    """Domain helpers on top of :class:`MessagePublisher`."""

    def __init__(self, publisher: MessagePublisher, topology: Topology | None = None) -> None:
        self._publisher = publisher
        self._topology = topology or get_topology()

    async def publish_order_created(self, message: OrderCreatedMessage) -> PublishReceipt:
        """Hand the order-creation message to the order exchange."""
        return await self._publisher.publish(
            self._topology.order_exchange,
            self._topology.names.order_routing_key,
            message,
            correlation_id=message.id,
        )

    async def publish_payment_requested(self, order_id: str) -> PublishReceipt:
        """Hand the payment request for ``order_id`` to the payment exchange."""
        return await self._publisher.publish(
            self._topology.payment_exchange,
            self._topology.names.payment_routing_key,
            order_id,
            correlation_id=order_id,
        )

    async def submit(self, message: OrderCreatedMessage) -> None:
        """Publish both work messages for a new order, in order.

        Raises:
            PublishError: If either publish is not confirmed. Nothing is
                published for the payment when the first publish fails.
        """
        await self.publish_order_created(message)
        await self.publish_payment_requested(message.id)


__all__ = ["OrderEvents"]
