"""Confirmed publishing of work messages.

A publish either returns a :class:`PublishReceipt` (the broker confirmed the
hand-off) or raises :class:`PublishError`. A receipt says nothing about
consumer-side processing.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from aio_pika.exceptions import AMQPError
from pydantic import BaseModel

from order_service.core.settings import RabbitSettings, get_rabbit_settings
from order_service.infra.messaging.exceptions import PublishError
from order_service.infra.metrics.tracking import track_message_published, track_publish_failure
from order_service.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker, RabbitExchange

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"

# Failures worth another attempt; anything else is surfaced immediately.
TRANSIENT_PUBLISH_ERRORS: tuple[type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    AMQPError,
)


@dataclass(frozen=True, slots=True)
class PublishReceipt:
    """Broker confirmation of a hand-off."""

    exchange: str
    routing_key: str
    correlation_id: str
    attempts: int


def serialize_payload(payload: Any) -> bytes:
    """Encode a payload as JSON bytes.

    ``bytes`` are passed through untouched; pydantic models use their JSON
    serializer; anything else goes through ``json.dumps``.
    """
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, BaseModel):
        return payload.model_dump_json().encode("utf-8")
    return json.dumps(payload, ensure_ascii=False, default=str).encode("utf-8")


class MessagePublisher:
    """Publishes persistent JSON messages and waits for broker confirms.

    Example:
        publisher = MessagePublisher(broker)
        await publisher.publish(
            topology.payment_exchange,
            "payment.request",
            order_id,
            correlation_id=order_id,
        )
    """

    def __init__(
        self,
        broker: RabbitBroker | None,
        *,
        settings: RabbitSettings | None = None,
        retry_initial_delay: float = 0.2,
    ) -> None:
        settings = settings or get_rabbit_settings()
        self._broker = broker
        self._timeout = settings.publish_timeout
        self._max_attempts = settings.publish_retry_attempts
        self._retry_initial_delay = retry_initial_delay

    async def publish(
        self,
        exchange: RabbitExchange | str,
        routing_key: str,
        payload: Any,
        *,
        correlation_id: str,
        durable: bool = True,
        timeout: float | None = None,
    ) -> PublishReceipt:
        """Hand ``payload`` to ``exchange`` and wait for the confirm.

        Args:
            exchange: Target exchange (object or name).
            routing_key: Routing key for the direct exchange.
            payload: dict/str/bytes/pydantic model, sent as JSON.
            correlation_id: Caller-assigned id, also used as message id.
            durable: Publish with persistent delivery mode.
            timeout: Seconds to wait for the confirm per attempt.

        Raises:
            PublishError: If no confirm arrived within the attempt budget or
                the broker is unavailable.
        """
        exchange_name = exchange if isinstance(exchange, str) else exchange.name
        if self._broker is None:
            track_publish_failure(exchange_name, routing_key)
            raise PublishError(
                "RabbitMQ is not available",
                details={"exchange": exchange_name, "routing_key": routing_key},
            )

        body = serialize_payload(payload)
        wait = timeout or self._timeout
        attempts = 0

        @retry(
            max_attempts=self._max_attempts,
            initial_delay=self._retry_initial_delay,
            max_delay=2.0,
            exceptions=TRANSIENT_PUBLISH_ERRORS,
            operation="rabbit.publish",
        )
        async def _send() -> None:
            nonlocal attempts
            attempts += 1
            await asyncio.wait_for(
                self._broker.publish(
                    body,
                    exchange=exchange,
                    routing_key=routing_key,
                    persist=durable,
                    correlation_id=correlation_id,
                    message_id=correlation_id,
                    content_type=CONTENT_TYPE_JSON,
                    timeout=wait,
                ),
                timeout=wait,
            )

        try:
            await _send()
        except RetryError as e:
            track_publish_failure(exchange_name, routing_key)
            raise PublishError(
                f"Publish to {exchange_name} not confirmed after {e.attempts} attempts",
                details={
                    "exchange": exchange_name,
                    "routing_key": routing_key,
                    "correlation_id": correlation_id,
                    "last_error": str(e.last_exception),
                },
            ) from e.last_exception
        except Exception as e:
            track_publish_failure(exchange_name, routing_key)
            raise PublishError(
                f"Publish to {exchange_name} failed: {e}",
                details={
                    "exchange": exchange_name,
                    "routing_key": routing_key,
                    "correlation_id": correlation_id,
                },
            ) from e

        track_message_published(exchange_name, routing_key)
        logger.debug(
            "Message confirmed",
            extra={
                "exchange": exchange_name,
                "routing_key": routing_key,
                "correlation_id": correlation_id,
                "attempts": attempts,
            },
        )
        return PublishReceipt(
            exchange=exchange_name,
            routing_key=routing_key,
            correlation_id=correlation_id,
            attempts=attempts,
        )
