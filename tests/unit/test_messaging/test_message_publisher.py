"""Tests for MessagePublisher."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from order_service.core.settings import RabbitSettings
from order_service.features.orders.schemas import OrderCreatedMessage
from order_service.infra.messaging.exceptions import PublishError
from order_service.infra.messaging.publisher import MessagePublisher, serialize_payload

SETTINGS = RabbitSettings(publish_retry_attempts=3, publish_timeout=1.0)


def _publisher(broker) -> MessagePublisher:
    return MessagePublisher(broker, settings=SETTINGS, retry_initial_delay=0)


def _broker(**kwargs) -> MagicMock:
    broker = MagicMock()
    broker.publish = AsyncMock(**kwargs)
    return broker


@pytest.mark.unit
class TestMessagePublisher:
    async def test_confirmed_publish_returns_receipt(self, topology):
        broker = _broker()

        receipt = await _publisher(broker).publish(
            topology.payment_exchange,
            "payment.request",
            "order-1",
            correlation_id="order-1",
        )

        assert receipt.exchange == topology.payment_exchange.name
        assert receipt.correlation_id == "order-1"
        assert receipt.attempts == 1
        kwargs = broker.publish.await_args.kwargs
        assert broker.publish.await_args.args[0] == b'"order-1"'
        assert kwargs["persist"] is True
        assert kwargs["correlation_id"] == "order-1"
        assert kwargs["message_id"] == "order-1"
        assert kwargs["routing_key"] == "payment.request"
        assert kwargs["content_type"] == "application/json"

    async def test_transient_failure_is_retried(self, topology):
        broker = _broker(side_effect=[ConnectionError("reset"), None])

        receipt = await _publisher(broker).publish(
            topology.order_exchange, "order.create", {"a": 1}, correlation_id="c"
        )

        assert receipt.attempts == 2

    async def test_exhausted_attempts_raise_publish_error(self, topology):
        broker = _broker(side_effect=TimeoutError())

        with pytest.raises(PublishError) as exc_info:
            await _publisher(broker).publish(
                topology.order_exchange, "order.create", {"a": 1}, correlation_id="c"
            )

        assert broker.publish.await_count == 3
        assert exc_info.value.details["correlation_id"] == "c"

    async def test_non_transient_failure_is_not_retried(self, topology):
        broker = _broker(side_effect=ValueError("bad exchange"))

        with pytest.raises(PublishError, match="bad exchange"):
            await _publisher(broker).publish("x", "order.create", {}, correlation_id="c")

        assert broker.publish.await_count == 1

    async def test_missing_broker_raises_publish_error(self):
        with pytest.raises(PublishError, match="not available"):
            await _publisher(None).publish("x", "order.create", {}, correlation_id="c")


@pytest.mark.unit
class TestSerializePayload:
    def test_bytes_pass_through(self):
        assert serialize_payload(b"raw") == b"raw"

    def test_string_is_json_encoded(self):
        assert serialize_payload("order-1") == b'"order-1"'

    def test_pydantic_model(self):
        message = OrderCreatedMessage(
            id="o1", user_id="u", product_id="p", quantity=1, location="Termez"
        )
        assert json.loads(serialize_payload(message))["id"] == "o1"

    def test_unicode_kept(self):
        assert serialize_payload({"location": "Тошкент"}).decode() == '{"location": "Тошкент"}'
