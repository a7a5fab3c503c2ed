"""Shared lifecycle for worker processes.

Startup order: logging -> database -> broker connection -> topology. Any
failure before the first delivery is fatal and the process exits non-zero.
Shutdown lets FastStream drain in-flight handlers (``RABBIT_GRACEFUL_TIMEOUT``)
before the database pool is disposed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from faststream import FastStream

from order_service.core.settings import get_db_settings
from order_service.infra.database import close_database, init_database
from order_service.infra.messaging.broker import connect_broker, get_broker
from order_service.infra.messaging.exceptions import BrokerConnectionError
from order_service.infra.messaging.topology import Topology, declare_topology, get_topology

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker

logger = logging.getLogger(__name__)


def require_broker() -> RabbitBroker:
    """Return the process broker or fail: workers cannot run without RabbitMQ."""
    broker = get_broker()
    if broker is None:
        raise BrokerConnectionError(
            "RabbitMQ is not enabled; set RABBIT_ENABLED=true and AMQP_URI"
        )
    return broker


def build_worker_app(
    name: str,
    broker: RabbitBroker,
    topology: Topology | None = None,
) -> FastStream:
    """Wrap ``broker`` in a FastStream app with the worker lifecycle hooks."""
    topology = topology or get_topology()
    app = FastStream(broker, logger=logger)

    @app.on_startup
    async def startup() -> None:
        logger.info("Starting worker", extra={"worker": name})
        if get_db_settings().is_configured:
            await init_database()
        await connect_broker(broker)
        await declare_topology(broker, topology)

    @app.after_startup
    async def ready() -> None:
        logger.info("Worker consuming", extra={"worker": name})

    @app.after_shutdown
    async def shutdown() -> None:
        await close_database()
        logger.info("Worker stopped", extra={"worker": name})

    return app


__all__ = ["build_worker_app", "require_broker"]
