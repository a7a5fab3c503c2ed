"""Tests for POST /order."""

from __future__ import annotations

import pytest

from order_service.core.dependencies.messaging import get_order_events
from order_service.features.orders.router import ORDER_ID_HEADER
from order_service.features.orders.schemas import OrderCreatedMessage
from order_service.infra.messaging.exceptions import PublishError

VALID_ORDER = {
    "user_id": "user-7",
    "product_id": "product-3",
    "quantity": 2,
    "location": "Andijan",
}


class RecordingEvents:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.submitted: list[OrderCreatedMessage] = []

    async def submit(self, message: OrderCreatedMessage) -> None:
        if self.fail:
            raise PublishError("no confirm", details={"exchange": "order-service.orders"})
        self.submitted.append(message)


@pytest.fixture
def events(app) -> RecordingEvents:
    recording = RecordingEvents()
    app.dependency_overrides[get_order_events] = lambda: recording
    return recording


@pytest.mark.unit
class TestCreateOrder:
    async def test_accepted_with_order_id_header(self, client, events):
        response = await client.post("/order", json=VALID_ORDER)

        assert response.status_code == 202
        assert response.json() == {"message": "user order created"}
        order_id = response.headers[ORDER_ID_HEADER]
        [message] = events.submitted
        assert message.id == order_id
        assert message.user_id == "user-7"
        assert message.quantity == 2

    async def test_each_order_gets_a_new_id(self, client, events):
        first = await client.post("/order", json=VALID_ORDER)
        second = await client.post("/order", json=VALID_ORDER)

        assert first.headers[ORDER_ID_HEADER] != second.headers[ORDER_ID_HEADER]

    async def test_extra_fields_ignored(self, client, events):
        response = await client.post("/order", json={**VALID_ORDER, "coupon": "X"})
        assert response.status_code == 202

    @pytest.mark.parametrize(
        "body",
        [
            {**VALID_ORDER, "quantity": 0},
            {**VALID_ORDER, "quantity": -3},
            {**VALID_ORDER, "quantity": "2"},
            {**VALID_ORDER, "user_id": ""},
            {key: value for key, value in VALID_ORDER.items() if key != "location"},
        ],
    )
    async def test_invalid_order_is_400(self, client, events, body):
        response = await client.post("/order", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "invalid json"}
        assert events.submitted == []

    async def test_malformed_json_is_400(self, client, events):
        response = await client.post(
            "/order",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid json"}

    async def test_unconfirmed_publish_is_503(self, app, client):
        app.dependency_overrides[get_order_events] = lambda: RecordingEvents(fail=True)

        response = await client.post("/order", json=VALID_ORDER)

        assert response.status_code == 503
        assert response.json() == {"error": "order could not be queued"}
        assert ORDER_ID_HEADER not in response.headers

    async def test_broker_disabled_is_503(self, client):
        response = await client.post("/order", json=VALID_ORDER)
        assert response.status_code == 503
