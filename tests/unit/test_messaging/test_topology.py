"""Tests for topology naming, construction and declaration."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from order_service.core.settings import RabbitSettings, WorkflowSettings
from order_service.infra.messaging.conventions import TopologyNames
from order_service.infra.messaging.exceptions import TopologyError
from order_service.infra.messaging.topology import (
    build_topology,
    declare_topology,
    describe_topology,
)


def _mock_broker() -> MagicMock:
    broker = MagicMock()
    broker.declare_exchange = AsyncMock(side_effect=lambda exchange: MagicMock(name=exchange.name))
    queue = MagicMock()
    queue.bind = AsyncMock()
    broker.declare_queue = AsyncMock(return_value=queue)
    broker.bound_queue = queue
    return broker


@pytest.mark.unit
class TestTopologyNames:
    def test_prefixed_names(self):
        names = TopologyNames.from_settings(RabbitSettings(queue_prefix="shop"))

        assert names.order_exchange == "shop.orders"
        assert names.payment_exchange == "shop.payments"
        assert names.retry_exchange == "shop.retry"
        assert names.order_queue == "shop.order-queue"
        assert names.payment_queue == "shop.payment-queue"
        assert names.retry_queue == "shop.retry-queue"
        assert names.payment_routing_key == "payment.request"


@pytest.mark.unit
class TestBuildTopology:
    def test_payment_queue_dead_letters_into_retry_exchange(self, topology):
        args = topology.payment_queue.arguments

        assert args["x-dead-letter-exchange"] == topology.retry_exchange.name
        assert args["x-dead-letter-routing-key"] == topology.names.retry_routing_key

    def test_retry_queue_expires_back_to_payment_exchange(self, topology):
        args = topology.retry_queue.arguments

        assert args["x-message-ttl"] == 5000
        assert args["x-dead-letter-exchange"] == topology.payment_exchange.name
        assert args["x-dead-letter-routing-key"] == topology.names.payment_routing_key

    def test_order_queue_has_no_retry_loop(self, topology):
        assert not topology.order_queue.arguments

    def test_everything_durable(self, topology):
        assert all(q.durable for q in topology.queues)
        assert all(e.durable for e in topology.exchanges)

    def test_retry_delay_from_settings(self):
        topology = build_topology(
            TopologyNames.from_settings(RabbitSettings()),
            WorkflowSettings(retry_delay_seconds=30),
        )
        assert topology.retry_queue.arguments["x-message-ttl"] == 30_000
        assert topology.retry_delay_ms == 30_000

    def test_describe(self, topology):
        description = describe_topology(topology)

        assert [e["type"] for e in description["exchanges"]] == ["direct"] * 3
        assert {b["routing_key"] for b in description["bindings"]} == {
            "order.create",
            "payment.request",
            "payment.retry",
        }
        retry = next(q for q in description["queues"] if q["name"].endswith("retry-queue"))
        assert retry["arguments"]["x-message-ttl"] == 5000


@pytest.mark.unit
class TestDeclareTopology:
    async def test_declares_every_exchange_queue_and_binding(self, topology):
        broker = _mock_broker()

        await declare_topology(broker, topology)

        assert broker.declare_exchange.await_count == 3
        declared_queues = [call.args[0] for call in broker.declare_queue.await_args_list]
        assert declared_queues == list(topology.queues)
        routing_keys = [call.kwargs["routing_key"] for call in broker.bound_queue.bind.await_args_list]
        assert routing_keys == ["order.create", "payment.request", "payment.retry"]

    async def test_redeclaration_is_harmless(self, topology):
        broker = _mock_broker()

        await declare_topology(broker, topology)
        await declare_topology(broker, topology)

        assert broker.declare_queue.await_count == 6

    async def test_failure_raises_topology_error(self, topology):
        broker = _mock_broker()
        broker.declare_queue = AsyncMock(side_effect=ConnectionError("PRECONDITION_FAILED"))

        with pytest.raises(TopologyError) as exc_info:
            await declare_topology(broker, topology)

        assert "queue" in exc_info.value.details["step"]
        assert "PRECONDITION_FAILED" in str(exc_info.value)
