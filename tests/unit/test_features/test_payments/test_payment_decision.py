"""Tests for PaymentDecisionHandler."""

from __future__ import annotations

from uuid import uuid4

import pytest

from order_service.features.orders.models import Order, OrderStatus
from order_service.features.payments.decision import ORDER_NOT_VISIBLE, PaymentDecisionHandler
from order_service.features.payments.gateway import (
    AlwaysFailsGateway,
    AlwaysSucceedsGateway,
    ChargeResult,
)
from order_service.features.payments.handlers import decode_payment_request
from order_service.features.payments.repository import get_payment_repository
from order_service.infra.messaging.exceptions import MalformedMessageError
from order_service.infra.messaging.headers import DeliveryMetadata
from order_service.infra.messaging.outcomes import PermanentFailure, Success, TransientFailure


class CountingGateway:
    def __init__(self, approve: bool = True) -> None:
        self.approve = approve
        self.calls: list[tuple[str, int]] = []

    async def charge(self, order_id: str, attempt_number: int) -> ChargeResult:
        self.calls.append((order_id, attempt_number))
        return ChargeResult.ok() if self.approve else ChargeResult.declined("card declined")


async def _order(session_factory, status: OrderStatus = OrderStatus.PENDING) -> str:
    order_id = str(uuid4())
    async with session_factory() as session, session.begin():
        session.add(
            Order(
                id=order_id,
                user_id="u",
                product_id="p",
                quantity=3,
                location="Bukhara",
                status=status,
            )
        )
    return order_id


@pytest.mark.unit
class TestPaymentDecision:
    async def test_missing_order_is_transient(self, session_factory):
        gateway = CountingGateway()
        result = await PaymentDecisionHandler(session_factory, gateway).decide("nope", 1)

        assert result == TransientFailure(ORDER_NOT_VISIBLE)
        assert gateway.calls == []

    async def test_cancelled_order_is_permanent(self, session_factory):
        order_id = await _order(session_factory, OrderStatus.CANCELLED)
        gateway = CountingGateway()

        result = await PaymentDecisionHandler(session_factory, gateway).decide(order_id, 1)

        assert isinstance(result, PermanentFailure)
        assert gateway.calls == []

    async def test_purchased_order_skips_gateway(self, session_factory):
        order_id = await _order(session_factory, OrderStatus.PURCHASED)
        gateway = CountingGateway()

        result = await PaymentDecisionHandler(session_factory, gateway).decide(order_id, 2)

        assert result == Success()
        assert gateway.calls == []

    async def test_declined_charge_is_transient(self, session_factory):
        order_id = await _order(session_factory)

        result = await PaymentDecisionHandler(session_factory, AlwaysFailsGateway()).decide(
            order_id, 1
        )

        assert result == TransientFailure("payment gateway unavailable")
        async with session_factory() as session:
            order = await session.get(Order, order_id)
            assert order.status is OrderStatus.PENDING

    async def test_approved_charge_records_payment_and_status(self, session_factory):
        order_id = await _order(session_factory)

        result = await PaymentDecisionHandler(session_factory, AlwaysSucceedsGateway()).decide(
            order_id, 1
        )

        assert result == Success()
        async with session_factory() as session:
            order = await session.get(Order, order_id)
            payments = await get_payment_repository().list_for_order(session, order_id)
        assert order.status is OrderStatus.PURCHASED
        assert len(payments) == 1
        assert payments[0].created_at is not None

    async def test_handle_passes_attempt_number(self, session_factory):
        order_id = await _order(session_factory)
        gateway = CountingGateway(approve=False)

        await PaymentDecisionHandler(session_factory, gateway).handle(
            order_id, DeliveryMetadata(death_count=2)
        )

        assert gateway.calls == [(order_id, 3)]


@pytest.mark.unit
class TestDecodePaymentRequest:
    def test_json_string(self):
        assert decode_payment_request(b'"0192f0c4-aaaa"') == "0192f0c4-aaaa"

    @pytest.mark.parametrize(
        "body",
        [b"", b"not json", b"42", b'{"id": "x"}', b'""', b'"   "', b"null", b"\xff"],
    )
    def test_malformed(self, body):
        with pytest.raises(MalformedMessageError):
            decode_payment_request(body)

    def test_too_long(self):
        with pytest.raises(MalformedMessageError, match="too long"):
            decode_payment_request(b'"' + b"a" * 37 + b'"')

    def test_deeply_nested_body(self):
        with pytest.raises(MalformedMessageError, match="not JSON"):
            decode_payment_request(b"[" * 100_000)
