"""In-memory stand-ins for broker deliveries and the retry loop."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from order_service.infra.messaging.consumer import RetryAwareConsumer
from order_service.infra.messaging.outcomes import DeadLetterEntry, Settlement


@dataclass
class FakeDelivery:
    """Records how the consumer settled it.

    Set ``fail_settlement`` to simulate a closed channel.
    """

    body: bytes
    headers: dict[str, Any] = field(default_factory=dict)
    correlation_id: str | None = None
    message_id: str | None = None
    fail_settlement: bool = False
    acked: bool = False
    rejected: bool = False
    requeue: bool | None = None

    @classmethod
    def payment_request(cls, order_id: str, **kwargs: Any) -> FakeDelivery:
        return cls(
            body=json.dumps(order_id).encode(),
            correlation_id=order_id,
            message_id=order_id,
            **kwargs,
        )

    async def ack(self) -> None:
        if self.fail_settlement:
            raise ConnectionError("channel closed")
        self.acked = True

    async def reject(self, requeue: bool = False) -> None:
        if self.fail_settlement:
            raise ConnectionError("channel closed")
        self.rejected = True
        self.requeue = requeue

    @property
    def settled(self) -> bool:
        return self.acked or self.rejected


class RecordingSink:
    """Dead-letter sink keeping entries in a list; ``fail=True`` loses them."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.entries: list[DeadLetterEntry] = []

    async def record(self, entry: DeadLetterEntry) -> bool:
        if self.fail:
            return False
        self.entries.append(entry)
        return True


def dead_letter(
    headers: dict[str, Any],
    *,
    queue: str,
    reason: str,
    exchange: str,
    routing_key: str,
) -> dict[str, Any]:
    """Return headers with ``x-death`` updated as RabbitMQ does.

    One entry per (queue, reason); a repeat death increments that entry's
    count and moves it to the front.
    """
    updated = copy.deepcopy(headers)
    entries: list[dict[str, Any]] = list(updated.get("x-death", []))
    for index, entry in enumerate(entries):
        if entry["queue"] == queue and entry["reason"] == reason:
            entry = {**entry, "count": entry["count"] + 1}
            entries.pop(index)
            entries.insert(0, entry)
            break
    else:
        entries.insert(
            0,
            {
                "count": 1,
                "reason": reason,
                "queue": queue,
                "exchange": exchange,
                "routing-keys": [routing_key],
            },
        )
    updated["x-death"] = entries
    return updated


class RetryLoop:
    """Drives one payment request around payment queue -> retry queue laps.

    ``consumer_factory`` is called for every delivery, so each attempt is
    handled by a fresh consumer, as after a worker restart. TTL waits are
    skipped.
    """

    def __init__(
        self,
        consumer_factory: Callable[[], RetryAwareConsumer[Any]],
        *,
        payment_queue: str,
        payment_exchange: str,
        retry_queue: str,
        retry_exchange: str,
        max_laps: int = 50,
    ) -> None:
        self._consumer_factory = consumer_factory
        self.payment_queue = payment_queue
        self.payment_exchange = payment_exchange
        self.retry_queue = retry_queue
        self.retry_exchange = retry_exchange
        self.max_laps = max_laps
        self.deliveries: list[FakeDelivery] = []

    @classmethod
    def for_topology(
        cls,
        consumer_factory: Callable[[], RetryAwareConsumer[Any]],
        topology: Any,
    ) -> RetryLoop:
        return cls(
            consumer_factory,
            payment_queue=topology.payment_queue.name,
            payment_exchange=topology.payment_exchange.name,
            retry_queue=topology.retry_queue.name,
            retry_exchange=topology.retry_exchange.name,
        )

    async def run(self, order_id: str) -> list[Settlement]:
        """Deliver until the message is acknowledged; returns every outcome."""
        headers: dict[str, Any] = {}
        outcomes: list[Settlement] = []
        for _ in range(self.max_laps):
            delivery = FakeDelivery.payment_request(order_id, headers=headers)
            self.deliveries.append(delivery)
            outcome = await self._consumer_factory().process(delivery)
            outcomes.append(outcome)
            if outcome is not Settlement.RETRY:
                return outcomes

            headers = dead_letter(
                delivery.headers,
                queue=self.payment_queue,
                reason="rejected",
                exchange=self.payment_exchange,
                routing_key="payment.request",
            )
            headers = dead_letter(
                headers,
                queue=self.retry_queue,
                reason="expired",
                exchange=self.retry_exchange,
                routing_key="payment.retry",
            )

        msg = f"message still cycling after {self.max_laps} laps"
        raise AssertionError(msg)
