"""Order worker: persists orders from the order queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from faststream.rabbit.annotations import RabbitMessage

from order_service.features.dead_letters.recorder import DeadLetterRecorder
from order_service.features.orders.handlers import build_order_consumer
from order_service.infra.database import AsyncSessionLocal
from order_service.infra.messaging.consumer import raw_body_decoder
from order_service.infra.messaging.topology import get_topology
from order_service.workers.app import build_worker_app, require_broker

if TYPE_CHECKING:
    from faststream import FastStream

logger = logging.getLogger(__name__)


def create_order_worker() -> FastStream:
    """Build the order worker application.

    Example:
        app = create_order_worker()
        await app.run()
    """
    broker = require_broker()
    topology = get_topology()
    consumer = build_order_consumer(
        session_factory=AsyncSessionLocal,
        recorder=DeadLetterRecorder(AsyncSessionLocal),
        topology=topology,
    )

    @broker.subscriber(
        topology.order_queue,
        topology.order_exchange,
        decoder=raw_body_decoder,
        title="order-created",
    )
    async def handle_order_created(body: bytes, message: RabbitMessage) -> None:
        await consumer.process(message)

    return build_worker_app("order-worker", broker, topology)


__all__ = ["create_order_worker"]
