"""Main CLI entry point for order-service."""

import click

from order_service.cli.commands import dead_letters, orders, run, topology
from order_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="order-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Order Service CLI - API, queue workers and RabbitMQ topology.

    \b
    Command Groups:
      run            Run the API, the order worker or the payment worker
      topology       Declare or inspect exchanges, queues and bindings
      orders         Show an order, its payments and dead letters
      dead-letters   Browse abandoned work items

    \b
    Quick Start:
      order-service topology show         # Print the topology
      order-service topology declare      # Declare it on the broker
      order-service run api               # HTTP ingress
      order-service run order-worker      # Persist orders
      order-service run payment-worker    # Charge orders with retries
      order-service dead-letters list     # What was given up on
    """
    ctx.ensure_object(dict)


cli.add_command(run.run)
cli.add_command(topology.topology)
cli.add_command(orders.orders)
cli.add_command(dead_letters.dead_letters)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
