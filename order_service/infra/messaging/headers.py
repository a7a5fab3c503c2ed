"""Redelivery metadata derived from the broker's ``x-death`` header.

RabbitMQ appends one ``x-death`` entry per (queue, reason) pair each time a
message is dead-lettered and increments that entry's ``count`` on later laps.
In the payment retry loop a message dies twice per lap: ``rejected`` on the
payment queue and ``expired`` on the retry queue. The ``rejected`` count on the
work queue is therefore the number of failed attempts so far.

Design decisions:
- Derived only from headers, never from process memory, so the attempt
  number survives consumer restarts and is shared by every consumer.
- Malformed or missing headers mean "first attempt" rather than an error.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

X_DEATH_HEADER = "x-death"
REJECTED_REASON = "rejected"


@dataclass(frozen=True, slots=True)
class DeliveryMetadata:
    """Per-delivery redelivery information; never part of the payload.

    Attributes:
        death_count: Times this message was previously dead-lettered from
            the work queue (0 on first delivery).

    Example:
        headers = {"x-death": [{"queue": "payment-queue", "reason": "rejected", "count": 2}]}
        meta = DeliveryMetadata.from_headers(headers, queue="payment-queue")
        assert meta.death_count == 2
        assert meta.attempt_number == 3
    """

    death_count: int = 0

    @property
    def attempt_number(self) -> int:
        """1-based attempt number of the current delivery."""
        return self.death_count + 1

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, Any] | None,
        *,
        queue: str | None = None,
    ) -> DeliveryMetadata:
        """Extract the death count from delivery headers.

        Prefers the entry recording rejections from ``queue``; falls back to
        the first (most recent) entry, then to 0.
        """
        if not headers:
            return cls()

        entries = headers.get(X_DEATH_HEADER)
        if not isinstance(entries, Sequence) or isinstance(entries, str | bytes):
            return cls()

        tables = [entry for entry in entries if isinstance(entry, Mapping)]
        if not tables:
            return cls()

        if queue is not None:
            for entry in tables:
                if (
                    _as_text(entry.get("queue")) == queue
                    and _as_text(entry.get("reason")) == REJECTED_REASON
                ):
                    return cls(death_count=_safe_int(entry.get("count")))

        return cls(death_count=_safe_int(tables[0].get("count")))


def _as_text(value: Any) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is None:
        return None
    return str(value)


def _safe_int(value: Any, default: int = 0) -> int:
    """Convert ``value`` to a non-negative int, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (ValueError, TypeError):
        return default
    return number if number >= 0 else default


__all__ = [
    "REJECTED_REASON",
    "X_DEATH_HEADER",
    "DeliveryMetadata",
]
