"""Simulated payment gateways.

Every gateway decides from ``(order_id, attempt_number)`` alone, so the same
order gets the same answer on every consumer, across restarts and under any
amount of concurrency. ``attempt_number`` is 1-based.

Variants:
    - AlwaysSucceedsGateway: approves the first attempt.
    - FailsThenSucceedsGateway(n): declines attempts 1..n, approves after.
    - AlwaysFailsGateway: declines every attempt.
    - ScenarioGateway: picks one of the three per order from a stable hash.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from order_service.core.settings import (
    GatewayMode,
    PaymentGatewaySettings,
    get_gateway_settings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChargeResult:
    """Gateway answer for one charge attempt."""

    approved: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> ChargeResult:
        return cls(approved=True)

    @classmethod
    def declined(cls, reason: str) -> ChargeResult:
        return cls(approved=False, reason=reason)


class PaymentGateway(Protocol):
    """Charges an order; a declined charge may be retried later."""

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult: ...


class _LatencyMixin:
    latency_seconds: float = 0.0

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)


class AlwaysSucceedsGateway(_LatencyMixin):
    def __init__(self, latency_seconds: float = 0.0) -> None:
        self.latency_seconds = latency_seconds

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult:
        await self._simulate_latency()
        return ChargeResult.ok()


class FailsThenSucceedsGateway(_LatencyMixin):
    """Declines the first ``fail_times`` attempts of every order."""

    def __init__(self, fail_times: int = 1, latency_seconds: float = 0.0) -> None:
        if fail_times < 0:
            msg = "fail_times must be >= 0"
            raise ValueError(msg)
        self.fail_times = fail_times
        self.latency_seconds = latency_seconds

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult:
        await self._simulate_latency()
        if attempt_number <= self.fail_times:
            return ChargeResult.declined("payment gateway timeout")
        return ChargeResult.ok()


class AlwaysFailsGateway(_LatencyMixin):
    def __init__(self, latency_seconds: float = 0.0) -> None:
        self.latency_seconds = latency_seconds

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult:
        await self._simulate_latency()
        return ChargeResult.declined("payment gateway unavailable")


class Scenario(StrEnum):
    SUCCESS = "success"
    RETRY = "retry"
    FAIL = "fail"


_SCENARIOS = (Scenario.SUCCESS, Scenario.RETRY, Scenario.FAIL)


def scenario_for(order_id: str) -> Scenario:
    """Stable scenario assignment: sha256 of the order id, modulo 3."""
    digest = hashlib.sha256(order_id.encode("utf-8")).digest()
    return _SCENARIOS[int.from_bytes(digest[:8], "big") % len(_SCENARIOS)]


class ScenarioGateway(_LatencyMixin):
    """Demo gateway: each order succeeds, succeeds on retry, or always fails.

    Example:
        gateway = ScenarioGateway()
        result = await gateway.charge(order_id, attempt_number=1)
    """

    def __init__(self, latency_seconds: float = 0.0) -> None:
        self.latency_seconds = latency_seconds
        self._variants: dict[Scenario, PaymentGateway] = {
            Scenario.SUCCESS: AlwaysSucceedsGateway(),
            Scenario.RETRY: FailsThenSucceedsGateway(fail_times=1),
            Scenario.FAIL: AlwaysFailsGateway(),
        }

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult:
        await self._simulate_latency()
        scenario = scenario_for(order_id)
        logger.debug(
            "Gateway scenario selected",
            extra={"order_id": order_id, "scenario": scenario.value, "attempt": attempt_number},
        )
        return await self._variants[scenario].charge(order_id, attempt_number)


def build_gateway(settings: PaymentGatewaySettings | None = None) -> PaymentGateway:
    """Instantiate the gateway selected by ``PAYMENT_GATEWAY_MODE``."""
    settings = settings or get_gateway_settings()
    latency = settings.latency_seconds

    match settings.mode:
        case GatewayMode.ALWAYS_SUCCEEDS:
            gateway: PaymentGateway = AlwaysSucceedsGateway(latency)
        case GatewayMode.FAILS_THEN_SUCCEEDS:
            gateway = FailsThenSucceedsGateway(settings.fail_times, latency)
        case GatewayMode.ALWAYS_FAILS:
            gateway = AlwaysFailsGateway(latency)
        case _:
            gateway = ScenarioGateway(latency)

    logger.info(
        "Payment gateway configured",
        extra={"mode": settings.mode.value, "fail_times": settings.fail_times, "latency": latency},
    )
    return gateway


__all__ = [
    "AlwaysFailsGateway",
    "AlwaysSucceedsGateway",
    "ChargeResult",
    "FailsThenSucceedsGateway",
    "PaymentGateway",
    "Scenario",
    "ScenarioGateway",
    "build_gateway",
    "scenario_for",
]
