"""Exchange/queue topology with a broker-driven retry loop.

Layout::

    order exchange   --order.create-->    order queue
    payment exchange --payment.request--> payment queue
        payment queue: x-dead-letter-exchange    = retry exchange
                       x-dead-letter-routing-key = payment.retry
    retry exchange   --payment.retry-->   retry queue
        retry queue:   x-message-ttl             = retry delay (ms)
                       x-dead-letter-exchange    = payment exchange
                       x-dead-letter-routing-key = payment.request

A payment request rejected without requeue is dead-lettered into the retry
queue, waits there for the TTL and is dead-lettered back onto the payment
queue. Every lap adds to the ``x-death`` count the consumer reads, so the
attempt number survives consumer restarts.

The same ``RabbitQueue``/``RabbitExchange`` objects are used to declare the
topology and to register subscribers, so queue arguments always match and
re-declaration is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from faststream.rabbit import ExchangeType, RabbitExchange, RabbitQueue

from order_service.core.settings import WorkflowSettings, get_workflow_settings
from order_service.infra.messaging.conventions import TopologyNames
from order_service.infra.messaging.exceptions import TopologyError

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Binding:
    """A queue bound to an exchange with one routing key."""

    exchange: RabbitExchange
    queue: RabbitQueue
    routing_key: str


@dataclass(frozen=True, slots=True)
class Topology:
    """Every exchange, queue and binding the workflow relies on."""

    names: TopologyNames
    order_exchange: RabbitExchange
    payment_exchange: RabbitExchange
    retry_exchange: RabbitExchange
    order_queue: RabbitQueue
    payment_queue: RabbitQueue
    retry_queue: RabbitQueue
    retry_delay_ms: int

    @property
    def exchanges(self) -> tuple[RabbitExchange, ...]:
        return (self.order_exchange, self.payment_exchange, self.retry_exchange)

    @property
    def queues(self) -> tuple[RabbitQueue, ...]:
        return (self.order_queue, self.payment_queue, self.retry_queue)

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return (
            Binding(self.order_exchange, self.order_queue, self.names.order_routing_key),
            Binding(self.payment_exchange, self.payment_queue, self.names.payment_routing_key),
            Binding(self.retry_exchange, self.retry_queue, self.names.retry_routing_key),
        )


def _direct_exchange(name: str) -> RabbitExchange:
    return RabbitExchange(name=name, type=ExchangeType.DIRECT, durable=True, auto_delete=False)


def build_topology(
    names: TopologyNames | None = None,
    workflow_settings: WorkflowSettings | None = None,
) -> Topology:
    """Build the topology descriptor from names and the retry delay."""
    names = names or TopologyNames.from_settings()
    workflow_settings = workflow_settings or get_workflow_settings()

    order_queue = RabbitQueue(
        name=names.order_queue,
        durable=True,
        auto_delete=False,
        routing_key=names.order_routing_key,
    )
    payment_queue = RabbitQueue(
        name=names.payment_queue,
        durable=True,
        auto_delete=False,
        routing_key=names.payment_routing_key,
        arguments={
            "x-dead-letter-exchange": names.retry_exchange,
            "x-dead-letter-routing-key": names.retry_routing_key,
        },
    )
    retry_queue = RabbitQueue(
        name=names.retry_queue,
        durable=True,
        auto_delete=False,
        routing_key=names.retry_routing_key,
        arguments={
            "x-message-ttl": workflow_settings.retry_delay_ms,
            "x-dead-letter-exchange": names.payment_exchange,
            "x-dead-letter-routing-key": names.payment_routing_key,
        },
    )

    return Topology(
        names=names,
        order_exchange=_direct_exchange(names.order_exchange),
        payment_exchange=_direct_exchange(names.payment_exchange),
        retry_exchange=_direct_exchange(names.retry_exchange),
        order_queue=order_queue,
        payment_queue=payment_queue,
        retry_queue=retry_queue,
        retry_delay_ms=workflow_settings.retry_delay_ms,
    )


_topology: Topology | None = None


def get_topology() -> Topology:
    """Return the process-wide topology built from current settings."""
    global _topology
    if _topology is None:
        _topology = build_topology()
    return _topology


async def declare_topology(broker: RabbitBroker, topology: Topology | None = None) -> None:
    """Declare every exchange, queue and binding; safe to call repeatedly.

    The broker must already be connected.

    Raises:
        TopologyError: If any declaration or binding fails. Callers treat
            this as fatal at startup.
    """
    topology = topology or get_topology()
    step = "exchange"
    try:
        declared: dict[str, Any] = {}
        for exchange in topology.exchanges:
            step = f"exchange {exchange.name}"
            declared[exchange.name] = await broker.declare_exchange(exchange)

        for binding in topology.bindings:
            step = f"queue {binding.queue.name}"
            queue = await broker.declare_queue(binding.queue)
            step = f"binding {binding.queue.name} <- {binding.exchange.name}"
            await queue.bind(declared[binding.exchange.name], routing_key=binding.routing_key)
    except Exception as e:
        logger.exception("Topology declaration failed", extra={"step": step})
        raise TopologyError(
            f"Failed to declare {step}: {e}",
            details={"step": step},
        ) from e

    logger.info(
        "Topology declared",
        extra={
            "exchanges": [e.name for e in topology.exchanges],
            "queues": [q.name for q in topology.queues],
            "retry_delay_ms": topology.retry_delay_ms,
        },
    )


def describe_topology(topology: Topology | None = None) -> dict[str, Any]:
    """Return the topology as plain data (CLI output, diagnostics)."""
    topology = topology or get_topology()
    return {
        "exchanges": [{"name": e.name, "type": str(e.type.value)} for e in topology.exchanges],
        "queues": [
            {"name": q.name, "durable": q.durable, "arguments": dict(q.arguments or {})}
            for q in topology.queues
        ],
        "bindings": [
            {"exchange": b.exchange.name, "queue": b.queue.name, "routing_key": b.routing_key}
            for b in topology.bindings
        ],
    }
