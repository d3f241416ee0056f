"""CLI commands for the Product aggregate and stock."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import click

from ordercore.application.add_product import AddProductHandler, parse_product_status
from ordercore.application.adjust_prices import AdjustPricesByCategoryHandler
from ordercore.application.adjust_stock import AdjustStockHandler
from ordercore.application.delete_product import DeleteProductHandler
from ordercore.application.dto import ProductDTO
from ordercore.application.show_product import (
    ListProductsHandler,
    LowStockProductsHandler,
    SearchProductsHandler,
    ShowProductHandler,
)
from ordercore.application.update_product import UpdateProductHandler
from ordercore.domain.exceptions import DomainException
from ordercore.domain.model.criteria import ProductSearchCriteria
from ordercore.infrastructure.bootstrap import uow_factory
from ordercore.infrastructure.cli.common import fail, money
from ordercore.infrastructure.settings import Settings

STATUS_CHOICE = click.Choice(["AVAILABLE", "OUT_OF_STOCK", "DISCONTINUED"], case_sensitive=False)


def _display_products(products: list[ProductDTO]) -> None:
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Category':<14} {'Price':>10} {'Stock':>7}  Status")
    click.echo("-" * 74)
    for p in products:
        click.echo(
            f"{p.id:<6} {p.name:<20} {p.category:<14} {money(p.price):>10} "
            f"{p.stock_quantity:>7}  {p.status}"
        )


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=click.IntRange(min=0), help="Opening stock.")
@click.option("--category", default="", help="Catalog category.")
@click.option("--description", default="", help="Free-text description.")
@click.option("--status", default=None, type=STATUS_CHOICE)
@click.pass_obj
def product_add(
    settings: Settings,
    name: str,
    price: str,
    stock: int,
    category: str,
    description: str,
    status: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(uow_factory(settings))

    try:
        product = handler.handle(
            name=name,
            price=price,
            stock_quantity=stock,
            category=category,
            description=description,
            status=status,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Product #{product.id} '{product.name}' added at {money(product.price)} "
        f"with {product.stock_quantity} in stock"
    )


@click.command("list")
@click.option("--category", default=None, help="Only AVAILABLE products in this category.")
@click.pass_obj
def product_list(settings: Settings, category: str | None) -> None:
    """List products in the catalog."""
    _display_products(ListProductsHandler(uow_factory(settings)).handle(category))


@click.command("show")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def product_show(settings: Settings, product_id: int) -> None:
    """Show a single product."""
    try:
        product = ShowProductHandler(uow_factory(settings)).handle(product_id)
    except DomainException as exc:
        raise fail(exc)

    _display_products([product])
    if product.description:
        click.echo()
        click.echo(product.description)


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--name", default=None)
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--category", default=None)
@click.option("--description", default=None)
@click.option("--status", default=None, type=STATUS_CHOICE)
@click.pass_obj
def product_update(
    settings: Settings,
    product_id: int,
    name: str | None,
    price: str | None,
    category: str | None,
    description: str | None,
    status: str | None,
) -> None:
    """Update a product's details (not its stock)."""
    handler = UpdateProductHandler(uow_factory(settings))

    try:
        product = handler.handle(
            product_id,
            name=name,
            price=price,
            category=category,
            description=description,
            status=status,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Product #{product_id} updated.")
    _display_products([product])


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.pass_obj
def product_delete(settings: Settings, product_id: int) -> None:
    """Remove a product from the catalog."""
    try:
        DeleteProductHandler(uow_factory(settings)).handle(product_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Product #{product_id} deleted.")


@click.command("search")
@click.option("--name", default=None, help="Substring of the product name.")
@click.option("--category", "categories", multiple=True, help="Repeatable.")
@click.option("--min-price", default=None)
@click.option("--max-price", default=None)
@click.option("--in-stock", is_flag=True, default=False, help="Only products with stock.")
@click.option("--status", "statuses", multiple=True, type=STATUS_CHOICE, help="Repeatable.")
@click.pass_obj
def product_search(
    settings: Settings,
    name: str | None,
    categories: tuple[str, ...],
    min_price: str | None,
    max_price: str | None,
    in_stock: bool,
    statuses: tuple[str, ...],
) -> None:
    """Search the catalog."""
    try:
        criteria = ProductSearchCriteria(
            name=name,
            categories=list(categories),
            min_price=_decimal(min_price, "--min-price"),
            max_price=_decimal(max_price, "--max-price"),
            in_stock_only=in_stock,
            statuses=[parse_product_status(s) for s in statuses],
        )
        products = SearchProductsHandler(uow_factory(settings)).handle(criteria)
    except DomainException as exc:
        raise fail(exc)

    _display_products(products)


@click.command("low-stock")
@click.option("--threshold", default=10, type=int, show_default=True)
@click.pass_obj
def product_low_stock(settings: Settings, threshold: int) -> None:
    """List products whose stock is below a threshold."""
    try:
        products = LowStockProductsHandler(uow_factory(settings)).handle(threshold)
    except DomainException as exc:
        raise fail(exc)

    _display_products(products)


@click.command("adjust-stock")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--delta", required=True, type=int, help="Units to add (negative to remove).")
@click.pass_obj
def product_adjust_stock(settings: Settings, product_id: int, delta: int) -> None:
    """Restock or write off units of a product."""
    try:
        new_quantity = AdjustStockHandler(uow_factory(settings)).handle(product_id, delta)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Product #{product_id} stock is now {new_quantity}.")


@click.command("adjust-prices")
@click.option("--category", required=True)
@click.option("--multiplier", required=True, help="E.g. 0.9 for 10% off.")
@click.pass_obj
def product_adjust_prices(settings: Settings, category: str, multiplier: str) -> None:
    """Scale the price of every product in a category."""
    try:
        changed = AdjustPricesByCategoryHandler(uow_factory(settings)).handle(
            category, multiplier
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Adjusted prices of {changed} product(s) in '{category}'.")


def _decimal(raw: str | None, option: str) -> Decimal | None:
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise click.BadParameter(f"{option} must be a decimal amount, got '{raw}'")
