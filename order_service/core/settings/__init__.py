"""Modular Pydantic Settings v2 configuration.

One frozen settings model per domain (app, db, rabbit, logging, workflow,
payment gateway), each read from its own environment prefix and optionally
from conf/<domain>.yaml plus conf/<domain>.d/*.yaml.

Import settings via the cached loaders:
    from order_service.core.settings import get_workflow_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_gateway_settings,
    get_logging_settings,
    get_rabbit_settings,
    get_workflow_settings,
)
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .rabbit import RabbitSettings
from .workflow import GatewayMode, PaymentGatewaySettings, WorkflowSettings

__all__ = [
    "AppSettings",
    "GatewayMode",
    "LoggingSettings",
    "PaymentGatewaySettings",
    "PostgresSettings",
    "RabbitSettings",
    "WorkflowSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_gateway_settings",
    "get_logging_settings",
    "get_rabbit_settings",
    "get_workflow_settings",
]
