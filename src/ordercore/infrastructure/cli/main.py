import click

from ordercore.domain.exceptions import DomainException
from ordercore.infrastructure.bootstrap import load_settings
from ordercore.infrastructure.cli.catalog_commands import (
    product_add,
    product_list,
    product_update,
    user_add,
    user_list,
)
from ordercore.infrastructure.cli.inventory_commands import (
    inventory_add,
    inventory_adjust,
    inventory_relocate,
    inventory_show,
)
from ordercore.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_list,
    order_show,
    order_status,
)
from ordercore.infrastructure.logging import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """ordercore — order creation and inventory consistency"""
    try:
        settings = load_settings()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings.log_level)
    ctx.obj = settings


@cli.group()
def order() -> None:
    """Create orders and move them through their lifecycle."""


@cli.group()
def inventory() -> None:
    """Manage stock levels."""


@cli.group()
def product() -> None:
    """Manage the local product catalog."""


@cli.group()
def user() -> None:
    """Manage the local user directory."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
inventory.add_command(inventory_add)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_relocate)
inventory.add_command(inventory_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
user.add_command(user_add)
user.add_command(user_list)
