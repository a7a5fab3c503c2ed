"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from order_service.core.settings.loader import get_rabbit_settings

    settings = get_rabbit_settings()  # First call: loads and validates
    settings = get_rabbit_settings()  # Subsequent calls: cached instance

Testing:
    Clear the cache to force a reload after changing the environment:
    get_rabbit_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .rabbit import RabbitSettings
from .workflow import PaymentGatewaySettings, WorkflowSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> PostgresSettings:
    """Get cached database settings."""
    return PostgresSettings()


@lru_cache(maxsize=1)
def get_rabbit_settings() -> RabbitSettings:
    """Get cached RabbitMQ settings."""
    return RabbitSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_workflow_settings() -> WorkflowSettings:
    """Get cached workflow settings."""
    return WorkflowSettings()


@lru_cache(maxsize=1)
def get_gateway_settings() -> PaymentGatewaySettings:
    """Get cached payment gateway settings."""
    return PaymentGatewaySettings()


def clear_all_caches() -> None:
    """Clear every cached settings instance (useful in tests)."""
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_rabbit_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_workflow_settings.cache_clear()
    get_gateway_settings.cache_clear()
