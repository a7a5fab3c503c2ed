"""Context management for structured logging.

Fields bound here are injected into every log record emitted from the same
async task, so a consumer can bind ``correlation_id``, ``queue`` and
``attempt`` once per delivery and every log line below it carries them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        set_log_context(correlation_id="0192...", queue="order-service.payment-queue")
        logger.info("Handling delivery")  # record carries both fields
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current logging context."""
    _log_context.set({})


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields for the duration of a ``with`` block.

    The previous context is restored on exit, even when the block raises.

    Example:
        with log_context(correlation_id=delivery.correlation_id, attempt=2):
            await handle(delivery)
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the contextvars log context onto records.

    Attached to the root QueueHandler by :func:`configure_logging`. Attributes
    already present on the record (e.g. passed through ``extra``) win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
