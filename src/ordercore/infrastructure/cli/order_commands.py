"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import click

from ordercore.application.cancel_order import CancelOrderHandler
from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.delete_order import DeleteOrderHandler
from ordercore.application.dto import OrderDTO, OrderItemSpec
from ordercore.application.search_orders import (
    CountOrdersHandler,
    SearchOrdersHandler,
    TotalSpendHandler,
)
from ordercore.application.show_order import ListUserOrdersHandler, ShowOrderHandler
from ordercore.application.update_order_status import (
    UpdateOrderStatusHandler,
    parse_status,
)
from ordercore.domain.exceptions import DomainException
from ordercore.domain.model.criteria import OrderSearchCriteria
from ordercore.infrastructure.bootstrap import uow_factory
from ordercore.infrastructure.cli.common import fail, money
from ordercore.infrastructure.settings import Settings


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:5' (product ID : quantity) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        pid_str, qty_str = pair.rsplit(":", 1)
        try:
            product_id = int(pid_str)
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid item '{pair}'. Product ID and quantity must be integers."
            )
        specs.append(OrderItemSpec(product_id=product_id, quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo(f"Created:  {dto.created_at:%Y-%m-%d %H:%M} UTC")
    click.echo()
    click.echo(f"  {'Product':<10} {'Qty':>5} {'Price':>12} {'Subtotal':>12}")
    click.echo(f"  {'-'*42}")
    for item in dto.items:
        click.echo(
            f"  {item.product_id:<10} {item.quantity:>5} "
            f"{money(item.unit_price):>12} {money(item.subtotal):>12}"
        )
    click.echo(f"  {'-'*42}")
    click.echo(f"  {'Order Total':<17} {money(dto.total_amount):>25}")


def _display_order_rows(orders: list[OrderDTO]) -> None:
    if not orders:
        click.echo("No orders found.")
        return
    click.echo(f"{'ID':<6} {'User':<6} {'Status':<10} {'Items':>5} {'Total':>12}  Created")
    click.echo("-" * 60)
    for o in orders:
        click.echo(
            f"{o.id:<6} {o.user_id:<6} {o.status:<10} {len(o.items):>5} "
            f"{money(o.total_amount):>12}  {o.created_at:%Y-%m-%d %H:%M}"
        )


@click.command("create")
@click.option("--user", "user_id", required=True, type=int, help="Ordering user ID.")
@click.option("--address", required=True, help="Shipping address.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.pass_obj
def order_create(settings: Settings, user_id: int, address: str, items: str) -> None:
    """Create a new order (reserves stock)."""
    specs = _parse_items(items)
    handler = CreateOrderHandler(uow_factory(settings))

    try:
        dto = handler.handle(user_id=user_id, shipping_address=address, item_specs=specs)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(settings: Settings, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow_factory(settings))

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise fail(exc)

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", default=None, type=int, help="Only this user's orders.")
@click.pass_obj
def order_list(settings: Settings, user_id: int | None) -> None:
    """List orders, newest first."""
    handler = ListUserOrdersHandler(uow_factory(settings))
    _display_order_rows(handler.handle(user_id))


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice(["CONFIRMED", "SHIPPED", "DELIVERED"], case_sensitive=False),
    help="Target status.",
)
@click.pass_obj
def order_status(settings: Settings, order_id: int, new_status: str) -> None:
    """Advance an order's status."""
    handler = UpdateOrderStatusHandler(uow_factory(settings))

    try:
        dto = handler.handle(order_id, new_status)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.pass_obj
def order_cancel(settings: Settings, order_id: int) -> None:
    """Cancel an order (restores reserved stock)."""
    handler = CancelOrderHandler(uow_factory(settings))

    try:
        result = handler.handle(order_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{order_id} cancelled.")
    for product_id in result.unrestored_product_ids:
        click.echo(f"Warning: product {product_id} no longer exists; stock not restored.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.confirmation_option(prompt="Deleting does not restore stock. Continue?")
@click.pass_obj
def order_delete(settings: Settings, order_id: int) -> None:
    """Delete an order and its items (does NOT restore stock)."""
    handler = DeleteOrderHandler(uow_factory(settings))

    try:
        handler.handle(order_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{order_id} deleted.")


@click.command("search")
@click.option("--user", "user_id", default=None, type=int)
@click.option("--status", default=None)
@click.option("--from", "start_date", default=None, type=click.DateTime())
@click.option("--until", "end_date", default=None, type=click.DateTime())
@click.option("--min-amount", default=None)
@click.option("--max-amount", default=None)
@click.option(
    "--sort-by",
    default="order_date",
    type=click.Choice(["order_date", "total_amount"]),
)
@click.option(
    "--direction",
    default="DESC",
    type=click.Choice(["ASC", "DESC"], case_sensitive=False),
)
@click.pass_obj
def order_search(
    settings: Settings,
    user_id: int | None,
    status: str | None,
    start_date: datetime | None,
    end_date: datetime | None,
    min_amount: str | None,
    max_amount: str | None,
    sort_by: str,
    direction: str,
) -> None:
    """Search orders by user, status, date range and amount."""
    try:
        criteria = OrderSearchCriteria(
            user_id=user_id,
            status=parse_status(status) if status else None,
            start_date=_aware(start_date),
            end_date=_aware(end_date),
            min_amount=_decimal(min_amount, "--min-amount"),
            max_amount=_decimal(max_amount, "--max-amount"),
            sort_by=sort_by,
            sort_direction=direction.upper(),
        )
        orders = SearchOrdersHandler(uow_factory(settings)).handle(criteria)
    except DomainException as exc:
        raise fail(exc)

    _display_order_rows(orders)


@click.command("total-spend")
@click.option("--user", "user_id", required=True, type=int, help="User ID.")
@click.pass_obj
def order_total_spend(settings: Settings, user_id: int) -> None:
    """Total amount a user has spent (cancelled orders excluded)."""
    total = TotalSpendHandler(uow_factory(settings)).handle(user_id)
    click.echo(f"User {user_id} total spend: {money(total)}")


@click.command("count")
@click.option("--from", "start_date", required=True, type=click.DateTime())
@click.option("--until", "end_date", required=True, type=click.DateTime())
@click.pass_obj
def order_count(settings: Settings, start_date: datetime, end_date: datetime) -> None:
    """Count orders created between two dates (inclusive)."""
    try:
        count = CountOrdersHandler(uow_factory(settings)).handle(
            _aware(start_date), _aware(end_date)
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"{count} order(s) created between "
        f"{start_date:%Y-%m-%d %H:%M} and {end_date:%Y-%m-%d %H:%M}"
    )


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _decimal(raw: str | None, option: str) -> Decimal | None:
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise click.BadParameter(f"{option} must be a decimal amount, got '{raw}'")
