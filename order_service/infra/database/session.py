"""Database session management with psycopg3 async driver.

Every consumer invocation and every repository call opens its own
``AsyncSession`` from :data:`AsyncSessionLocal`; sessions are never shared
between concurrently handled deliveries.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from order_service.core.settings import get_db_settings
from order_service.utils.retry import retry

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

db_settings = get_db_settings()

# Local SQLite file when no database is configured (tests, quick demos).
FALLBACK_URL = "sqlite+aiosqlite:///./order_service.db"


def _engine_url() -> str:
    return db_settings.url if db_settings.is_configured else FALLBACK_URL


def _engine_kwargs() -> dict[str, Any]:
    if db_settings.is_configured:
        return db_settings.sqlalchemy_engine_kwargs()
    return {"echo": db_settings.echo}


engine = create_async_engine(_engine_url(), **_engine_kwargs())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Example:
        async with get_async_session() as session:
            order = await session.get(Order, order_id)
    """
    async with AsyncSessionLocal() as session:
        yield session


@retry(
    max_attempts=db_settings.startup_retry_attempts,
    initial_delay=db_settings.startup_retry_delay,
    max_delay=30.0,
    stop_after_delay=db_settings.startup_retry_timeout,
    operation="init_database",
)
async def init_database() -> None:
    """Check database connectivity with exponential backoff.

    Raises:
        RetryError: If the database stays unreachable for every attempt.
    """
    logger.info(
        "Initializing database connection",
        extra={
            "max_attempts": db_settings.startup_retry_attempts,
            "initial_delay": db_settings.startup_retry_delay,
        },
    )

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    logger.info(
        "Database connection established",
        extra={"host": db_settings.host if db_settings.is_configured else "sqlite"},
    )


async def close_database() -> None:
    """Dispose the engine; call during process shutdown."""
    logger.info("Closing database connection")
    await engine.dispose()


__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
