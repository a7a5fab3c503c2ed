"""RabbitMQ messaging: topology, publishing and retry-aware consumption."""

from __future__ import annotations

from .broker import check_broker_health, connect_broker, get_broker, stop_broker
from .consumer import DeadLetterSink, Delivery, RetryAwareConsumer, raw_body_decoder
from .conventions import TopologyNames
from .exceptions import (
    BrokerConnectionError,
    MalformedMessageError,
    MessagingError,
    PublishError,
    TopologyError,
)
from .headers import DeliveryMetadata
from .outcomes import (
    DeadLetterEntry,
    HandlerResult,
    PermanentFailure,
    Settlement,
    Success,
    TransientFailure,
)
from .publisher import MessagePublisher, PublishReceipt
from .topology import Topology, build_topology, declare_topology, describe_topology, get_topology

__all__ = [
    "BrokerConnectionError",
    "DeadLetterEntry",
    "DeadLetterSink",
    "Delivery",
    "DeliveryMetadata",
    "HandlerResult",
    "MalformedMessageError",
    "MessagePublisher",
    "MessagingError",
    "PermanentFailure",
    "PublishError",
    "PublishReceipt",
    "RetryAwareConsumer",
    "Settlement",
    "Success",
    "Topology",
    "TopologyError",
    "TopologyNames",
    "TransientFailure",
    "build_topology",
    "check_broker_health",
    "connect_broker",
    "declare_topology",
    "describe_topology",
    "get_broker",
    "get_topology",
    "raw_body_decoder",
    "stop_broker",
]
