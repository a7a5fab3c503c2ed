"""Tests for OrderService and the order-creation consumer."""

from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import OperationalError

from order_service.core.settings import WorkflowSettings
from order_service.features.orders.handlers import (
    OrderCreationHandler,
    build_order_consumer,
    decode_order_created,
)
from order_service.features.orders.models import Order, OrderStatus
from order_service.features.orders.schemas import OrderCreatedMessage
from order_service.features.orders.service import OrderService
from order_service.infra.messaging.exceptions import MalformedMessageError
from order_service.infra.messaging.headers import DeliveryMetadata
from order_service.infra.messaging.outcomes import PermanentFailure, Settlement, Success
from tests.fixtures.messaging import FakeDelivery


def _message(order_id: str = "0192f0c4-0000-7000-8000-000000000001") -> OrderCreatedMessage:
    return OrderCreatedMessage(
        id=order_id,
        user_id="user-1",
        product_id="product-9",
        quantity=2,
        location="Tashkent",
    )


class FlakyService:
    """Raises ``failures`` datastore errors before succeeding."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def create_order(self, message: OrderCreatedMessage) -> bool:
        self.calls += 1
        if self.calls <= self.failures:
            raise OperationalError("INSERT", {}, ConnectionError("connection refused"))
        return True


class UnreachableDatabase:
    """Session factory whose sessions fail to open."""

    def __call__(self) -> UnreachableDatabase:
        return self

    async def __aenter__(self):
        raise OperationalError("SELECT 1", {}, ConnectionError("db down"))

    async def __aexit__(self, *exc_info) -> bool:
        return False


@pytest.mark.unit
class TestOrderService:
    async def test_creates_pending_order(self, session_factory):
        message = _message()

        assert await OrderService(session_factory).create_order(message) is True

        async with session_factory() as session:
            order = await session.get(Order, message.id)
        assert order.status is OrderStatus.PENDING
        assert order.quantity == 2
        assert order.location == "Tashkent"
        assert not order.is_settled

    async def test_duplicate_delivery_is_noop(self, session_factory):
        service = OrderService(session_factory)
        message = _message()

        assert await service.create_order(message) is True
        assert await service.create_order(message) is False

    async def test_duplicate_does_not_reset_status(self, session_factory):
        service = OrderService(session_factory)
        message = _message()
        await service.create_order(message)
        async with session_factory() as session, session.begin():
            (await session.get(Order, message.id)).status = OrderStatus.PURCHASED

        await service.create_order(message)

        async with session_factory() as session:
            assert (await session.get(Order, message.id)).status is OrderStatus.PURCHASED


@pytest.mark.unit
class TestOrderCreationHandler:
    async def test_retries_transient_datastore_errors(self):
        service = FlakyService(failures=2)
        handler = OrderCreationHandler(service, attempts=3, initial_delay=0)

        assert await handler.handle(_message(), DeliveryMetadata()) == Success()
        assert service.calls == 3

    async def test_exhausted_retries_are_permanent(self):
        service = FlakyService(failures=5)
        handler = OrderCreationHandler(service, attempts=2, initial_delay=0)

        result = await handler.handle(_message(), DeliveryMetadata())

        assert isinstance(result, PermanentFailure)
        assert "after 2 attempts" in result.reason
        assert service.calls == 2


@pytest.mark.unit
class TestOrderConsumer:
    async def test_stores_order_and_acks(self, session_factory, topology, sink):
        consumer = build_order_consumer(
            session_factory=session_factory,
            recorder=sink,
            topology=topology,
            settings=WorkflowSettings(),
        )
        message = _message()
        delivery = FakeDelivery(
            body=message.model_dump_json().encode(),
            correlation_id=message.id,
        )

        assert await consumer.process(delivery) is Settlement.ACK
        assert delivery.acked
        assert sink.entries == []
        assert consumer.max_retries == 0
        assert consumer.queue == topology.order_queue.name

    async def test_datastore_outage_dead_letters_as_order(self, topology, sink):
        consumer = build_order_consumer(
            session_factory=UnreachableDatabase(),
            recorder=sink,
            topology=topology,
            settings=WorkflowSettings(order_persist_retry_attempts=2, order_persist_retry_delay=0),
        )
        message = _message()
        delivery = FakeDelivery(body=message.model_dump_json().encode(), correlation_id=message.id)

        assert await consumer.process(delivery) is Settlement.DEAD_LETTER
        assert delivery.acked
        [entry] = sink.entries
        assert entry.service_name == "order"
        assert entry.work_item_id == message.id
        assert entry.number_of_retries == 0

    async def test_invalid_body_is_malformed(self, session_factory, topology, sink):
        consumer = build_order_consumer(
            session_factory=session_factory,
            recorder=sink,
            topology=topology,
            settings=WorkflowSettings(),
        )
        delivery = FakeDelivery(body=b'{"id": "x", "quantity": 0}', correlation_id="x")

        assert await consumer.process(delivery) is Settlement.MALFORMED
        assert sink.entries[0].service_name == "order"


@pytest.mark.unit
class TestDecodeOrderCreated:
    def test_valid(self):
        body = json.dumps(
            {
                "id": "abc",
                "user_id": " u1 ",
                "product_id": "p1",
                "quantity": 1,
                "location": "Khiva",
            }
        ).encode()

        message = decode_order_created(body)

        assert message.id == "abc"
        assert message.user_id == "u1"

    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"[]",
            b'{"id": "abc"}',
            b'{"id": "abc", "user_id": "u", "product_id": "p", "quantity": "1", "location": "l"}',
            b'{"id": "abc", "user_id": "u", "product_id": "p", "quantity": -1, "location": "l"}',
        ],
    )
    def test_invalid(self, body):
        with pytest.raises(MalformedMessageError):
            decode_order_created(body)
