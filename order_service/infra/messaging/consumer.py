"""Retry-aware consumer: turns handler results into broker settlements.

Per delivery::

    received -> handling -> settled-success   (ack)
                         -> settled-retry     (reject, no requeue)
                         -> settled-terminal  (dead-letter record, then ack)

- A transient failure is rejected without requeue while the broker-reported
  death count is below ``max_retries``; the queue's dead-letter exchange
  routes it into the delayed retry loop. No in-process sleeping.
- A permanent failure, or any failure once the budget is spent, is recorded
  by the dead-letter recorder and acknowledged.
- A body that cannot be decoded is recorded and acknowledged.
- Handler exceptions never escape; an unexpected exception counts as a
  transient failure.

The consumer keeps no per-delivery state on the instance, so any number of
deliveries can be processed concurrently (bounded by the channel prefetch).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

from order_service.infra.logging import log_context
from order_service.infra.messaging.exceptions import MalformedMessageError
from order_service.infra.messaging.headers import DeliveryMetadata
from order_service.infra.messaging.outcomes import (
    DeadLetterEntry,
    HandlerResult,
    PermanentFailure,
    Settlement,
    Success,
    TransientFailure,
)
from order_service.infra.metrics.tracking import track_message_consumed, track_message_settled

logger = logging.getLogger(__name__)

UNKNOWN_WORK_ITEM = "unknown"


class Delivery(Protocol):
    """The parts of a broker delivery the consumer relies on.

    ``faststream.rabbit.RabbitMessage`` satisfies this protocol.
    """

    body: bytes
    headers: Mapping[str, Any]
    correlation_id: str | None
    message_id: str | None

    async def ack(self) -> None: ...

    async def reject(self, requeue: bool = False) -> None: ...


class DeadLetterSink(Protocol):
    """Persists dead-letter entries; returns False on storage failure."""

    async def record(self, entry: DeadLetterEntry) -> bool: ...


class RetryAwareConsumer[T]:
    """Runs a handler for each delivery and settles it with the broker.

    Args:
        queue: Work queue name; used to pick the matching ``x-death`` entry.
        service_name: Stored on dead-letter records.
        decode: Turns the raw body into a work item; raises
            :class:`MalformedMessageError` for unusable input. Any other
            exception it raises is treated the same way.
        handler: Processes a work item and returns a :data:`HandlerResult`.
        recorder: Dead-letter sink.
        max_retries: Broker-level retries before giving up.
        work_item_id: Extracts the id stored on dead-letter records; defaults
            to the delivery's correlation id.

    Example:
        consumer = RetryAwareConsumer(
            queue=topology.payment_queue.name,
            service_name="payment",
            decode=decode_payment_request,
            handler=decision.handle,
            recorder=DeadLetterRecorder(),
            max_retries=3,
        )
        outcome = await consumer.process(message)
    """

    def __init__(
        self,
        *,
        queue: str,
        service_name: str,
        decode: Callable[[bytes], T],
        handler: Callable[[T, DeliveryMetadata], Awaitable[HandlerResult]],
        recorder: DeadLetterSink,
        max_retries: int,
        work_item_id: Callable[[T], str] | None = None,
    ) -> None:
        if max_retries < 0:
            msg = "max_retries must be >= 0"
            raise ValueError(msg)
        self.queue = queue
        self.service_name = service_name
        self.max_retries = max_retries
        self._decode = decode
        self._handler = handler
        self._recorder = recorder
        self._work_item_id = work_item_id

    async def process(self, delivery: Delivery) -> Settlement:
        """Handle one delivery end to end and settle it.

        Never raises for handler, decoding or recorder failures.
        """
        started = time.perf_counter()
        metadata = DeliveryMetadata.from_headers(delivery.headers, queue=self.queue)
        delivery_id = delivery.correlation_id or delivery.message_id or UNKNOWN_WORK_ITEM
        track_message_consumed(self.queue)

        with log_context(
            queue=self.queue,
            correlation_id=delivery_id,
            attempt=metadata.attempt_number,
        ):
            try:
                item = self._decode(delivery.body)
            except Exception as e:
                # Any decode failure is terminal; the body never enters the retry loop.
                if isinstance(e, MalformedMessageError):
                    error = str(e)
                else:
                    error = f"{type(e).__name__}: {e}"
                logger.warning("Malformed payload", extra={"error": error})
                await self._dead_letter(delivery_id, metadata, f"malformed payload: {error}")
                return await self._settle(delivery, Settlement.MALFORMED, started)

            item_id = self._work_item_id(item) if self._work_item_id else delivery_id
            result = await self._invoke(item, metadata)
            settlement = self.decide(result, metadata)

            if settlement is Settlement.DEAD_LETTER:
                await self._dead_letter(item_id, metadata, _reason(result))

            return await self._settle(delivery, settlement, started, result=result)

    def decide(self, result: HandlerResult, metadata: DeliveryMetadata) -> Settlement:
        """Map a handler result and the death count to a settlement."""
        match result:
            case Success():
                return Settlement.ACK
            case PermanentFailure():
                return Settlement.DEAD_LETTER
            case TransientFailure() if metadata.death_count < self.max_retries:
                return Settlement.RETRY
            case _:
                return Settlement.DEAD_LETTER

    async def _invoke(self, item: T, metadata: DeliveryMetadata) -> HandlerResult:
        try:
            return await self._handler(item, metadata)
        except Exception as e:
            logger.exception("Handler raised; treating as transient failure")
            return TransientFailure(f"{type(e).__name__}: {e}")

    async def _dead_letter(
        self,
        work_item_id: str,
        metadata: DeliveryMetadata,
        error: str,
    ) -> None:
        entry = DeadLetterEntry(
            work_item_id=work_item_id,
            number_of_retries=metadata.death_count,
            service_name=self.service_name,
            error=error,
        )
        stored = await self._recorder.record(entry)
        if not stored:
            logger.error(
                "Dead-letter record lost; acknowledging anyway",
                extra={"work_item_id": work_item_id, "error": error},
            )

    async def _settle(
        self,
        delivery: Delivery,
        settlement: Settlement,
        started: float,
        *,
        result: HandlerResult | None = None,
    ) -> Settlement:
        try:
            if settlement is Settlement.RETRY:
                await delivery.reject(requeue=False)
            else:
                await delivery.ack()
        except Exception:
            # Unsettled deliveries are redelivered by the broker once the channel closes.
            logger.exception("Settlement failed", extra={"outcome": settlement.value})
            return settlement

        duration = time.perf_counter() - started
        track_message_settled(self.queue, settlement.value, duration)
        logger.info(
            "Delivery settled",
            extra={
                "outcome": settlement.value,
                "reason": _reason(result) if result is not None else None,
                "duration": round(duration, 4),
            },
        )
        return settlement


def _reason(result: HandlerResult) -> str:
    if isinstance(result, TransientFailure | PermanentFailure):
        return result.reason
    return ""


async def raw_body_decoder(message: Any) -> bytes:
    """FastStream decoder that hands the undecoded body to the subscriber.

    Decoding happens inside the consumer so malformed bodies become
    dead-letter records instead of framework errors.
    """
    return message.body


__all__ = [
    "DeadLetterSink",
    "Delivery",
    "RetryAwareConsumer",
    "raw_body_decoder",
]
