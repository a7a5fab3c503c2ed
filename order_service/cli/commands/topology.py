"""Topology commands: declare or inspect exchanges, queues and bindings."""

import json
import sys

import click

from order_service.cli.utils import bullet, coro, error, header, info, success
from order_service.infra.messaging.broker import connect_broker, get_broker, stop_broker
from order_service.infra.messaging.exceptions import MessagingError
from order_service.infra.messaging.topology import declare_topology, describe_topology


@click.group(name="topology")
def topology() -> None:
    """RabbitMQ topology management."""


@topology.command()
@coro
async def declare() -> None:
    """Declare every exchange, queue and binding, then exit.

    Safe to run repeatedly; existing objects with matching arguments are left
    untouched.
    """
    broker = get_broker()
    if broker is None:
        error("RabbitMQ is not enabled (RABBIT_ENABLED=false)")
        sys.exit(1)

    try:
        await connect_broker(broker)
        await declare_topology(broker)
    except MessagingError as e:
        error(f"Topology declaration failed: {e}")
        sys.exit(1)
    finally:
        await stop_broker()

    success("Topology declared")


@topology.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def show(output_format: str) -> None:
    """Print the topology built from current settings (no broker needed)."""
    described = describe_topology()
    if output_format == "json":
        click.echo(json.dumps(described, indent=2))
        return

    header("Exchanges")
    for exchange in described["exchanges"]:
        info(f"{exchange['name']} ({exchange['type']})")

    header("Queues")
    for queue in described["queues"]:
        info(queue["name"])
        for key, value in queue["arguments"].items():
            bullet(key, value)

    header("Bindings")
    for binding in described["bindings"]:
        info(f"{binding['exchange']} --{binding['routing_key']}--> {binding['queue']}")
