"""Prometheus metrics for the messaging pipeline."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry so tests and multiple app instances never collide with the
# process-global default registry.
REGISTRY = CollectorRegistry()

# Covers handler durations from 1ms to 30s (gateway latency included)
HANDLER_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
)

# ============================================================================
# RabbitMQ metrics
# ============================================================================

rabbitmq_messages_published_total = Counter(
    "rabbitmq_messages_published_total",
    "Total number of messages confirmed by RabbitMQ",
    ["exchange", "routing_key"],
    registry=REGISTRY,
)

rabbitmq_publish_failures_total = Counter(
    "rabbitmq_publish_failures_total",
    "Total number of publishes that failed after all attempts",
    ["exchange", "routing_key"],
    registry=REGISTRY,
)

rabbitmq_messages_consumed_total = Counter(
    "rabbitmq_messages_consumed_total",
    "Total number of deliveries received from RabbitMQ",
    ["queue"],
    registry=REGISTRY,
)

rabbitmq_messages_settled_total = Counter(
    "rabbitmq_messages_settled_total",
    "Deliveries settled, by outcome (ack, retry, dead_letter, malformed)",
    ["queue", "outcome"],
    registry=REGISTRY,
)

rabbitmq_handler_duration_seconds = Histogram(
    "rabbitmq_handler_duration_seconds",
    "Time spent handling a delivery before settlement",
    ["queue"],
    buckets=HANDLER_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# ============================================================================
# Process metrics
# ============================================================================

application_info = Gauge(
    "application_info",
    "Static process information",
    ["service", "version", "environment", "role"],
    registry=REGISTRY,
)
