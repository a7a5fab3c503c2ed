"""Order-creation consumer.

Persists orders from the order queue. The order queue has no retry loop, so
the consumer runs with ``max_retries=0``: datastore failures are retried
in-process with backoff, and anything that still fails is dead-lettered with
service name ``order`` and acknowledged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from order_service.core.settings import WorkflowSettings, get_workflow_settings
from order_service.features.orders.schemas import OrderCreatedMessage
from order_service.features.orders.service import OrderService
from order_service.infra.messaging.consumer import DeadLetterSink, RetryAwareConsumer
from order_service.infra.messaging.exceptions import MalformedMessageError
from order_service.infra.messaging.outcomes import HandlerResult, PermanentFailure, Success
from order_service.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from order_service.infra.messaging.headers import DeliveryMetadata
    from order_service.infra.messaging.topology import Topology

logger = logging.getLogger(__name__)


def decode_order_created(body: bytes) -> OrderCreatedMessage:
    """Parse an order-creation body.

    Raises:
        MalformedMessageError: If the body is not a valid order message.
    """
    try:
        return OrderCreatedMessage.model_validate_json(body)
    except ValidationError as e:
        raise MalformedMessageError(
            f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}",
            details={"errors": e.errors(include_url=False)},
        ) from e


class OrderCreationHandler:
    """Stores one order, retrying datastore failures in-process."""

    def __init__(
        self,
        service: OrderService,
        *,
        attempts: int = 3,
        initial_delay: float = 0.5,
    ) -> None:
        self._persist = retry(
            max_attempts=attempts,
            initial_delay=initial_delay,
            max_delay=10.0,
            exceptions=(SQLAlchemyError, OSError),
            operation="order.persist",
        )(service.create_order)

    async def handle(
        self,
        message: OrderCreatedMessage,
        metadata: DeliveryMetadata,
    ) -> HandlerResult:
        try:
            created = await self._persist(message)
        except RetryError as e:
            return PermanentFailure(
                f"order could not be stored after {e.attempts} attempts: {e.last_exception}"
            )
        except SQLAlchemyError as e:
            return PermanentFailure(f"order could not be stored: {e}")

        if not created:
            logger.debug("Duplicate order delivery acknowledged", extra={"order_id": message.id})
        return Success()


def build_order_consumer(
    *,
    session_factory: async_sessionmaker[AsyncSession],
    recorder: DeadLetterSink,
    topology: Topology,
    settings: WorkflowSettings | None = None,
) -> RetryAwareConsumer[OrderCreatedMessage]:
    """Wire the order-creation consumer for the order queue."""
    settings = settings or get_workflow_settings()
    handler = OrderCreationHandler(
        OrderService(session_factory),
        attempts=settings.order_persist_retry_attempts,
        initial_delay=settings.order_persist_retry_delay,
    )
    return RetryAwareConsumer(
        queue=topology.order_queue.name,
        service_name=settings.order_service_name,
        decode=decode_order_created,
        handler=handler.handle,
        recorder=recorder,
        max_retries=0,
        work_item_id=lambda message: message.id,
    )


__all__ = [
    "OrderCreationHandler",
    "build_order_consumer",
    "decode_order_created",
]
