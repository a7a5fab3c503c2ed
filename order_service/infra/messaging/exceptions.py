"""Messaging exceptions.

Startup-level failures (``TopologyError``, ``BrokerConnectionError``) are
fatal for every process. ``PublishError`` is surfaced to callers after the
publisher's own retries are spent. ``MalformedMessageError`` never leaves a
consumer: it turns into a dead-letter record.
"""

from __future__ import annotations

from typing import Any


class MessagingError(Exception):
    """Base class for messaging failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BrokerConnectionError(MessagingError, ConnectionError):
    """The broker could not be reached within the configured timeout."""


class TopologyError(MessagingError):
    """Declaring an exchange, queue or binding failed."""


class PublishError(MessagingError):
    """A message could not be handed to the broker (no confirm within budget)."""


class MalformedMessageError(MessagingError):
    """A delivery body could not be decoded into a work item."""


__all__ = [
    "BrokerConnectionError",
    "MalformedMessageError",
    "MessagingError",
    "PublishError",
    "TopologyError",
]
