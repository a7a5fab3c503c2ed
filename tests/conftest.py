"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Database Fixtures: SQLAlchemy engine and session factory on SQLite
    - Messaging Fixtures: fake deliveries, recording dead-letter sink, topology
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from order_service.infra.messaging.topology import Topology
    from tests.fixtures.messaging import RecordingSink

# Ensure tests run without external infrastructure
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("RABBIT_ENABLED", "false")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("APP_ENVIRONMENT", "test")


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app() -> FastAPI:
    """Create a FastAPI application without running its lifespan.

    Example:
        async def test_routes(app):
            assert any(route.path == "/order" for route in app.routes)
    """
    from order_service.app.main import create_app

    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the app through ASGITransport.

    Example:
        async def test_health(client):
            response = await client.get("/health")
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Async engine on a per-test SQLite file with every table created.

    A file (rather than ``:memory:``) lets concurrent sessions use separate
    connections, as they do against PostgreSQL.
    """
    from order_service.core import models  # noqa: F401
    from order_service.core.database.base import Base

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like ``AsyncSessionLocal``."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Single session for repository tests; rolled back afterwards."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Messaging Fixtures
# ============================================================================


@pytest.fixture
def topology() -> Topology:
    """Topology with default names and a 5s retry delay."""
    from order_service.core.settings import RabbitSettings, WorkflowSettings
    from order_service.infra.messaging.conventions import TopologyNames
    from order_service.infra.messaging.topology import build_topology

    return build_topology(
        TopologyNames.from_settings(RabbitSettings(queue_prefix="order-service")),
        WorkflowSettings(max_retries=3, retry_delay_seconds=5),
    )


@pytest.fixture
def sink() -> RecordingSink:
    """Dead-letter sink that keeps entries in memory."""
    from tests.fixtures.messaging import RecordingSink

    return RecordingSink()
