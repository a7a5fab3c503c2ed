"""Handler results and dead-letter entries exchanged with the consumer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class Success:
    """The work item was processed; the delivery is acknowledged."""


@dataclass(frozen=True, slots=True)
class TransientFailure:
    """Processing failed but may succeed on a later attempt."""

    reason: str


@dataclass(frozen=True, slots=True)
class PermanentFailure:
    """Processing can never succeed; retrying is pointless."""

    reason: str


HandlerResult = Success | TransientFailure | PermanentFailure


class Settlement(StrEnum):
    """How a delivery was settled with the broker."""

    ACK = "ack"
    RETRY = "retry"
    DEAD_LETTER = "dead_letter"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class DeadLetterEntry:
    """A work item that was given up on.

    Attributes:
        work_item_id: Correlation id of the abandoned item.
        number_of_retries: Broker-level retries consumed before giving up.
        service_name: Consumer that gave up (``payment``, ``order``).
        error: Last failure reason.
    """

    work_item_id: str
    number_of_retries: int
    service_name: str
    error: str


__all__ = [
    "DeadLetterEntry",
    "HandlerResult",
    "PermanentFailure",
    "Settlement",
    "Success",
    "TransientFailure",
]
