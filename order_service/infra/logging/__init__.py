"""Logging infrastructure.

Structured logging shared by the API and both workers:
- JSONL format for log aggregation
- Automatic context injection (correlation_id, queue, attempt)
- QueueHandler + QueueListener for non-blocking I/O
- OpenTelemetry trace correlation

Basic usage:
    from order_service.infra.logging import log_context
    import logging

    logger = logging.getLogger(__name__)

    with log_context(correlation_id=order_id):
        logger.info("Processing payment")  # record includes correlation_id
"""

from order_service.infra.logging.config import (
    complete,
    configure_logging,
    setup_logging,
    shutdown,
)
from order_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)
from order_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "complete",
    "configure_logging",
    "get_log_context",
    "log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
