"""Application lifespan management.

Startup order:
1. Core (logging, metrics) - always runs first
2. Database - conditional on configuration
3. Messaging - broker connection and topology declaration

A failed topology declaration is always fatal. A broker that cannot be
reached is fatal when ``RABBIT_STARTUP_REQUIRE_RABBIT`` is set; otherwise the
API starts degraded and ``POST /order`` answers 503.

Shutdown order: reverse of startup.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from order_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_rabbit_settings,
)
from order_service.infra.logging.config import setup_logging
from order_service.infra.logging.config import shutdown as shutdown_logging
from order_service.infra.messaging.exceptions import BrokerConnectionError
from order_service.infra.metrics.prometheus import application_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _startup_core() -> None:
    app = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )
    application_info.labels(
        service=app.service_name,
        version=app.version,
        environment=app.environment,
        role="api",
    ).set(1)


async def _startup_database() -> None:
    from order_service.infra.database.session import init_database

    db = get_db_settings()
    if not db.is_configured:
        return

    try:
        await init_database()
    except Exception as e:
        if db.startup_require_db:
            logger.exception(
                "Database required but unavailable, failing startup",
                extra={"error": str(e), "startup_require_db": True},
            )
            raise
        logger.warning(
            "Database unavailable, continuing in degraded mode",
            extra={"error": str(e), "startup_require_db": False},
        )


async def _startup_messaging() -> None:
    from order_service.infra.messaging.broker import connect_broker, get_broker
    from order_service.infra.messaging.topology import declare_topology

    settings = get_rabbit_settings()
    broker = get_broker()
    if broker is None:
        return

    try:
        await connect_broker(broker)
    except BrokerConnectionError as e:
        if settings.startup_require_rabbit:
            logger.error(
                "RabbitMQ required but unavailable, failing startup",
                extra={"error": str(e), "startup_require_rabbit": True},
            )
            raise
        logger.warning(
            "RabbitMQ unavailable, continuing in degraded mode",
            extra={"error": str(e), "startup_require_rabbit": False},
        )
        return

    await declare_topology(broker)


async def _shutdown() -> None:
    from order_service.infra.database.session import close_database
    from order_service.infra.messaging.broker import stop_broker

    await stop_broker()
    await close_database()
    logger.info("Application stopped")
    shutdown_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop every service the API depends on."""
    await _startup_core()
    await _startup_database()
    await _startup_messaging()
    logger.info("Application ready", extra={"title": app.title})
    try:
        yield
    finally:
        await _shutdown()
