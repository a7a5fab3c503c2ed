"""Payment worker: retry-aware consumer of the payment queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from faststream.rabbit.annotations import RabbitMessage

from order_service.features.dead_letters.recorder import DeadLetterRecorder
from order_service.features.payments.gateway import build_gateway
from order_service.features.payments.handlers import build_payment_consumer
from order_service.infra.database import AsyncSessionLocal
from order_service.infra.messaging.consumer import raw_body_decoder
from order_service.infra.messaging.topology import get_topology
from order_service.workers.app import build_worker_app, require_broker

if TYPE_CHECKING:
    from faststream import FastStream

logger = logging.getLogger(__name__)


def create_payment_worker() -> FastStream:
    """Build the payment worker application.

    Deliveries are handled concurrently up to ``RABBIT_PREFETCH_COUNT``.
    """
    broker = require_broker()
    topology = get_topology()
    consumer = build_payment_consumer(
        session_factory=AsyncSessionLocal,
        gateway=build_gateway(),
        recorder=DeadLetterRecorder(AsyncSessionLocal),
        topology=topology,
    )

    @broker.subscriber(
        topology.payment_queue,
        topology.payment_exchange,
        decoder=raw_body_decoder,
        title="payment-requested",
    )
    async def handle_payment_requested(body: bytes, message: RabbitMessage) -> None:
        await consumer.process(message)

    logger.info(
        "Payment worker configured",
        extra={"queue": topology.payment_queue.name, "max_retries": consumer.max_retries},
    )
    return build_worker_app("payment-worker", broker, topology)


__all__ = ["create_payment_worker"]
