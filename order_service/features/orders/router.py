"""HTTP ingress for user orders."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from order_service.core.database import new_id
from order_service.core.dependencies.messaging import OrderEventsDep
from order_service.core.exceptions import ServiceUnavailableException
from order_service.features.orders.schemas import (
    ErrorResponse,
    OrderAccepted,
    OrderCreatedMessage,
    OrderRequest,
)
from order_service.infra.messaging.exceptions import PublishError
from order_service.infra.metrics.tracking import track_order_accepted

router = APIRouter(tags=["orders"])

logger = logging.getLogger(__name__)

ORDER_ID_HEADER = "X-Order-ID"


@router.post(
    "/order",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=OrderAccepted,
    summary="Submit an order",
    description=(
        "Accepts an order and queues it for persistence and payment. "
        "A 202 means both work messages were confirmed by the broker; "
        "it says nothing about the payment outcome."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Body is not a valid order"},
        503: {"model": ErrorResponse, "description": "Broker did not confirm the hand-off"},
    },
)
async def create_order(
    payload: OrderRequest,
    response: Response,
    events: OrderEventsDep,
) -> OrderAccepted:
    """Assign an id, publish the order and its payment request."""
    message = OrderCreatedMessage(id=new_id(), **payload.model_dump())

    try:
        await events.submit(message)
    except PublishError as e:
        logger.error(
            "Order could not be queued",
            extra={"order_id": message.id, "error": e.message, **e.details},
        )
        raise ServiceUnavailableException(
            detail="order could not be queued",
            type="publish-failed",
            extra={"order_id": message.id},
        ) from e

    track_order_accepted()
    logger.info(
        "Order accepted",
        extra={"order_id": message.id, "user_id": message.user_id},
    )
    response.headers[ORDER_ID_HEADER] = message.id
    return OrderAccepted()
