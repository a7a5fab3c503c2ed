"""RabbitMQ broker lifecycle using FastStream.

One ``RabbitBroker`` per process. The API only publishes through it; the
workers register subscribers on it and run it inside a ``FastStream`` app.

Concurrency and shutdown are broker-level settings:
- ``RABBIT_PREFETCH_COUNT`` becomes the channel QoS (``max_consumers``), which
  bounds how many deliveries are handled concurrently.
- ``RABBIT_GRACEFUL_TIMEOUT`` is how long shutdown waits for in-flight
  handlers before the channel is closed.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from order_service.core.settings import get_rabbit_settings
from order_service.infra.messaging.exceptions import BrokerConnectionError

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker


class ConnectionState(str, Enum):
    """Connection states reported by :func:`check_broker_health`."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    FAILED = "failed"


logger = logging.getLogger(__name__)

rabbit_settings = get_rabbit_settings()

broker: RabbitBroker | None = None
_not_configured_logged = False


def create_broker() -> RabbitBroker:
    """Build a broker from RabbitSettings without connecting it."""
    from faststream.rabbit import RabbitBroker

    return RabbitBroker(
        rabbit_settings.get_url(),
        max_consumers=rabbit_settings.prefetch_count,
        graceful_timeout=rabbit_settings.graceful_timeout,
        publisher_confirms=rabbit_settings.publisher_confirms,
        logger=logger,
    )


def get_broker() -> RabbitBroker | None:
    """Return the process broker, creating it on first use.

    Returns None when RabbitMQ is disabled (tests, degraded API mode).
    """
    global broker, _not_configured_logged

    if broker is not None:
        return broker

    if not rabbit_settings.is_configured:
        if not _not_configured_logged:
            logger.warning("RabbitMQ not configured - messaging disabled")
            _not_configured_logged = True
        return None

    broker = create_broker()
    return broker


async def connect_broker(target: RabbitBroker | None = None) -> RabbitBroker:
    """Connect the broker, bounded by ``RABBIT_CONNECTION_TIMEOUT``.

    Raises:
        BrokerConnectionError: If RabbitMQ is disabled or unreachable in time.
    """
    target = target or get_broker()
    if target is None:
        raise BrokerConnectionError("RabbitMQ is not enabled")

    logger.info(
        "Connecting to RabbitMQ",
        extra={
            "host": rabbit_settings.host,
            "vhost": rabbit_settings.vhost,
            "connection_timeout": rabbit_settings.connection_timeout,
        },
    )
    try:
        await asyncio.wait_for(target.connect(), timeout=rabbit_settings.connection_timeout)
    except TimeoutError:
        error_msg = f"RabbitMQ connection timeout after {rabbit_settings.connection_timeout}s"
        logger.error(error_msg, extra={"host": rabbit_settings.host})
        raise BrokerConnectionError(error_msg) from None
    except OSError as e:
        logger.error("RabbitMQ unreachable", extra={"host": rabbit_settings.host, "error": str(e)})
        raise BrokerConnectionError(f"RabbitMQ unreachable: {e}") from e

    logger.info("RabbitMQ connection established")
    return target


async def stop_broker() -> None:
    """Close the broker connection; waits for in-flight handlers."""
    if broker is None:
        logger.debug("RabbitMQ not configured, skipping broker shutdown")
        return

    logger.info("Stopping RabbitMQ broker")
    await broker.close()
    logger.info("RabbitMQ broker stopped")


async def check_broker_health() -> dict[str, Any]:
    """Report broker connectivity for health endpoints.

    Returns:
        Dictionary with ``status``, ``state``, ``is_connected`` and, when not
        healthy, a ``reason``.
    """
    if broker is None:
        return {
            "status": "unavailable",
            "state": ConnectionState.DISCONNECTED.value,
            "is_connected": False,
            "reason": "broker_not_configured",
        }

    connection = getattr(broker, "_connection", None)
    if connection is None:
        return {
            "status": "unhealthy",
            "state": ConnectionState.DISCONNECTED.value,
            "is_connected": False,
            "reason": "broker_not_connected",
        }

    if getattr(connection, "is_closed", False):
        return {
            "status": "unhealthy",
            "state": ConnectionState.FAILED.value,
            "is_connected": False,
            "reason": "connection_closed",
        }

    return {
        "status": "healthy",
        "state": ConnectionState.CONNECTED.value,
        "is_connected": True,
    }
