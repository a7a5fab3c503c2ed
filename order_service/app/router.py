"""Router registration and operational endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, FastAPI, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from order_service.core.settings import AppSettings
from order_service.features.orders.router import router as orders_router
from order_service.infra.messaging.broker import check_broker_health
from order_service.infra.metrics.prometheus import REGISTRY

ops_router = APIRouter(tags=["observability"])


@ops_router.get("/health", summary="Broker connectivity")
async def health(response: Response) -> dict[str, Any]:
    """Report whether the API can hand work to RabbitMQ.

    Answers 503 while the broker is unreachable so load balancers stop routing
    orders to this instance.
    """
    broker = await check_broker_health()
    if not broker["is_connected"]:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": broker["status"], "rabbitmq": broker}


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_routers(app: FastAPI, app_settings: AppSettings) -> None:
    """Include feature and operational routers."""
    app.include_router(orders_router)
    app.include_router(ops_router)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)
