"""Process entry points: the API and the two queue workers."""

import asyncio
import sys

import click

from order_service.cli.utils import error, info, success
from order_service.core.settings import get_app_settings, get_rabbit_settings, get_workflow_settings
from order_service.infra.messaging.exceptions import MessagingError
from order_service.utils.retry import RetryError


@click.group(name="run")
def run() -> None:
    """Run the API or a worker in the foreground."""


@run.command()
@click.option("--host", default=None, help="Host to bind (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Uvicorn log level",
)
def api(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run the HTTP ingress (POST /order)."""
    import uvicorn

    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"API will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")
    uvicorn.run(
        "order_service.app.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


def _run_worker(name: str, factory_path: str) -> None:
    from importlib import import_module

    module_name, _, attr = factory_path.rpartition(":")
    factory = getattr(import_module(module_name), attr)

    rabbit = get_rabbit_settings()
    workflow = get_workflow_settings()
    info(f"Starting {name} (prefetch={rabbit.prefetch_count}, max_retries={workflow.max_retries})")

    try:
        app = factory()
        asyncio.run(app.run())
    except (MessagingError, RetryError) as e:
        error(f"{name} failed to start: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        info(f"\n{name} interrupted")

    success(f"{name} stopped")


@run.command(name="order-worker")
def order_worker() -> None:
    """Consume the order queue and persist orders."""
    _run_worker("order-worker", "order_service.workers.orders:create_order_worker")


@run.command(name="payment-worker")
def payment_worker() -> None:
    """Consume the payment queue with broker-driven retries."""
    _run_worker("payment-worker", "order_service.workers.payments:create_payment_worker")
