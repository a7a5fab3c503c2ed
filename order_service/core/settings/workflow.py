"""Order/payment workflow settings.

Covers the retry budget enforced by the payment consumer, the delay applied by
the retry queue and the behaviour of the simulated payment gateway.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_gateway_yaml_source, create_workflow_yaml_source


class WorkflowSettings(BaseSettings):
    """Retry budget and per-service identifiers.

    Environment variables use WORKFLOW_ prefix.
    Example: WORKFLOW_MAX_RETRIES=5, WORKFLOW_RETRY_DELAY_SECONDS=10
    """

    # ─────────────────────────────────────────────────────
    # Retry loop
    # ─────────────────────────────────────────────────────
    max_retries: int = Field(
        default=3,
        ge=0,
        le=100,
        description="Broker-level retries before a payment is dead-lettered.",
    )
    retry_delay_seconds: int = Field(
        default=5,
        ge=1,
        le=86_400,
        description="Time a rejected payment waits in the retry queue (x-message-ttl).",
    )

    # ─────────────────────────────────────────────────────
    # Order persistence
    # ─────────────────────────────────────────────────────
    order_persist_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="In-process attempts to persist an order before it is dead-lettered.",
    )
    order_persist_retry_delay: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Initial backoff (seconds) between order persistence attempts.",
    )

    # ─────────────────────────────────────────────────────
    # Dead-letter bookkeeping
    # ─────────────────────────────────────────────────────
    payment_service_name: str = Field(
        default="payment",
        description="service_name stored on dead letters from the payment consumer.",
    )
    order_service_name: str = Field(
        default="order",
        description="service_name stored on dead letters from the order consumer.",
    )

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_workflow_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @property
    def retry_delay_ms(self) -> int:
        """Retry delay in milliseconds, as expected by x-message-ttl."""
        return self.retry_delay_seconds * 1000


class GatewayMode(StrEnum):
    """Payment gateway behaviour selected at startup."""

    SCENARIO = "scenario"
    ALWAYS_SUCCEEDS = "always_succeeds"
    FAILS_THEN_SUCCEEDS = "fails_then_succeeds"
    ALWAYS_FAILS = "always_fails"


class PaymentGatewaySettings(BaseSettings):
    """Simulated payment gateway configuration.

    Environment variables use PAYMENT_GATEWAY_ prefix.
    Example: PAYMENT_GATEWAY_MODE=fails_then_succeeds, PAYMENT_GATEWAY_FAIL_TIMES=2
    """

    mode: GatewayMode = Field(
        default=GatewayMode.SCENARIO,
        description="Gateway variant used by the payment worker.",
    )
    fail_times: int = Field(
        default=1,
        ge=0,
        le=100,
        description="Attempts that fail before success in fails_then_succeeds mode.",
    )
    latency_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=60.0,
        description="Artificial delay applied to every charge call.",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT_GATEWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_gateway_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
