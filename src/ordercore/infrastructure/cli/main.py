import logging
from dataclasses import replace
from pathlib import Path

import click

from ordercore.infrastructure.cli.order_commands import (
    order_cancel,
    order_count,
    order_create,
    order_delete,
    order_list,
    order_search,
    order_show,
    order_status,
    order_total_spend,
)
from ordercore.infrastructure.cli.product_commands import (
    product_add,
    product_adjust_prices,
    product_adjust_stock,
    product_delete,
    product_list,
    product_low_stock,
    product_search,
    product_show,
    product_update,
)
from ordercore.infrastructure.settings import Settings, parse_log_level


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding store.json.",
)
@click.option("--log-level", default=None, help="Logging level (e.g. INFO, DEBUG).")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, log_level: str | None) -> None:
    """ordercore: order lifecycle and inventory engine."""
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise click.ClickException(str(exc))

    overrides = {}
    if data_dir is not None:
        overrides["data_dir"] = data_dir
    if log_level is not None:
        try:
            overrides["log_level"] = parse_log_level(log_level)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="'--log-level'")
    if overrides:
        settings = replace(settings, **overrides)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products and stock."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_count)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_search)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_total_spend)
product.add_command(product_add)
product.add_command(product_adjust_prices)
product.add_command(product_adjust_stock)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_low_stock)
product.add_command(product_search)
product.add_command(product_show)
product.add_command(product_update)
