"""Dead-letter audit commands."""

import click

from order_service.cli.utils import coro, header, info


@click.group(name="dead-letters")
def dead_letters() -> None:
    """Browse work items the consumers gave up on."""


@dead_letters.command(name="list")
@click.option(
    "--service",
    "-s",
    default="payment",
    show_default=True,
    help="Consumer that wrote the records (payment or order)",
)
@click.option(
    "--limit",
    default=20,
    type=click.IntRange(min=1),
    show_default=True,
    help="Maximum records to display",
)
@coro
async def list_records(service: str, limit: int) -> None:
    """List the most recent dead-letter records of one consumer.

    Examples:
    \b
      order-service dead-letters list
      order-service dead-letters list --service order --limit 50
    """
    from order_service.features.dead_letters.repository import get_dead_letter_repository
    from order_service.infra import database

    try:
        async with database.AsyncSessionLocal() as session:
            records = await get_dead_letter_repository().list_by_service(
                session, service, limit=limit
            )
    finally:
        await database.close_database()

    header(f"Dead letters ({service})")
    if not records:
        info("No records")
        return

    for record in records:
        click.echo(f"  [{record.created_at:%Y-%m-%d %H:%M:%S}] {record.payment_id}")
        info(f"  retries: {record.number_of_retries}  error: {record.error}")
