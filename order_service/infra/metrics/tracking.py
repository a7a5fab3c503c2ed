"""Helper functions for tracking workflow and messaging metrics."""

from __future__ import annotations

import logging

from order_service.infra.metrics import business, prometheus

logger = logging.getLogger(__name__)


# ============================================================================
# Retry Tracking
# ============================================================================


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt.

    Args:
        operation: Name of the operation being retried
        attempt_number: Current attempt number (1-indexed)
    """
    business.retry_attempts_total.labels(
        operation=operation,
        attempt_number=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    """Track when all retry attempts are exhausted."""
    business.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    """Track successful operation after retries."""
    business.retry_success_after_failure_total.labels(
        operation=operation,
        attempts_needed=str(attempts_needed),
    ).inc()


# ============================================================================
# Messaging Tracking
# ============================================================================


def track_message_published(exchange: str, routing_key: str) -> None:
    """Track a publish confirmed by the broker."""
    prometheus.rabbitmq_messages_published_total.labels(
        exchange=exchange,
        routing_key=routing_key,
    ).inc()


def track_publish_failure(exchange: str, routing_key: str) -> None:
    """Track a publish that gave up after every attempt."""
    prometheus.rabbitmq_publish_failures_total.labels(
        exchange=exchange,
        routing_key=routing_key,
    ).inc()


def track_message_consumed(queue: str) -> None:
    """Track a delivery entering a consumer."""
    prometheus.rabbitmq_messages_consumed_total.labels(queue=queue).inc()


def track_message_settled(queue: str, outcome: str, duration: float) -> None:
    """Track how a delivery was settled and how long handling took.

    Args:
        queue: Queue the delivery came from.
        outcome: One of ``ack``, ``retry``, ``dead_letter``, ``malformed``.
        duration: Seconds between receipt and settlement.
    """
    prometheus.rabbitmq_messages_settled_total.labels(queue=queue, outcome=outcome).inc()
    prometheus.rabbitmq_handler_duration_seconds.labels(queue=queue).observe(duration)


# ============================================================================
# Workflow Tracking
# ============================================================================


def track_order_accepted() -> None:
    """Track an order handed off by the HTTP ingress."""
    business.orders_accepted_total.inc()


def track_payment_decision(result: str) -> None:
    """Track a payment decision (``success``, ``transient`` or ``permanent``)."""
    business.payment_decisions_total.labels(result=result).inc()


def track_dead_letter(service: str, *, stored: bool) -> None:
    """Track a dead-letter write attempt."""
    business.dead_letters_recorded_total.labels(
        service=service,
        outcome="stored" if stored else "storage_error",
    ).inc()
    if not stored:
        logger.debug("Dead-letter storage failure tracked", extra={"service": service})
