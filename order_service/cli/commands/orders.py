"""Order inspection commands."""

import sys

import click

from order_service.cli.utils import bullet, coro, error, header, info


@click.group(name="orders")
def orders() -> None:
    """Inspect stored orders and what happened to them."""


@orders.command()
@click.argument("order_id")
@coro
async def show(order_id: str) -> None:
    """Show an order with its payments and dead-letter records.

    Examples:
    \b
      order-service orders show 0192f0c4-8a1e-7b3c-9d2e-5f6a7b8c9d0e
    """
    from order_service.features.dead_letters.repository import get_dead_letter_repository
    from order_service.features.orders.repository import get_order_repository
    from order_service.features.payments.repository import get_payment_repository
    from order_service.infra import database

    try:
        async with database.AsyncSessionLocal() as session:
            order = await get_order_repository().get(session, order_id)
            payments = await get_payment_repository().list_for_order(session, order_id)
            dead_letters = await get_dead_letter_repository().list_for_work_item(
                session, order_id
            )
    finally:
        await database.close_database()

    if order is None and not dead_letters:
        error(f"Order {order_id} not found")
        sys.exit(1)

    header(f"Order {order_id}")
    if order is None:
        info("Not stored (the order worker never committed it)")
    else:
        bullet("status", order.status.value)
        bullet("settled", "yes" if order.is_settled else "no")
        bullet("user_id", order.user_id)
        bullet("product_id", order.product_id)
        bullet("quantity", order.quantity)
        bullet("location", order.location)
        bullet("created_at", order.created_at.isoformat())

    header("Payments")
    if not payments:
        info("None")
    for payment in payments:
        bullet(payment.id, payment.created_at.isoformat())

    header("Dead letters")
    if not dead_letters:
        info("None")
    for record in dead_letters:
        info(f"[{record.service_name}] after {record.number_of_retries} retries: {record.error}")
