"""Workflow metrics: orders, payments, dead letters and in-process retries."""

from __future__ import annotations

from prometheus_client import Counter

from order_service.infra.metrics.prometheus import REGISTRY

# ============================================================================
# Order / payment metrics
# ============================================================================

orders_accepted_total = Counter(
    "orders_accepted_total",
    "Orders accepted by the HTTP ingress and handed to the broker",
    registry=REGISTRY,
)

payment_decisions_total = Counter(
    "payment_decisions_total",
    "Payment decisions by result (success, transient, permanent)",
    ["result"],
    registry=REGISTRY,
)

dead_letters_recorded_total = Counter(
    "dead_letters_recorded_total",
    "Dead-letter records written, by service and storage outcome",
    ["service", "outcome"],
    registry=REGISTRY,
)

# ============================================================================
# Retry metrics
# ============================================================================

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total number of retry attempts",
    ["operation", "attempt_number"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total number of operations that exhausted all retries",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "retry_success_after_failure_total",
    "Total number of operations that succeeded after retry",
    ["operation", "attempts_needed"],
    registry=REGISTRY,
)
