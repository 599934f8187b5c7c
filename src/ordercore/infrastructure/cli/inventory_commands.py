"""CLI commands for inventory management."""

from __future__ import annotations

import click

from ordercore.application.provision_inventory import ProvisionInventoryHandler
from ordercore.application.show_inventory import ShowInventoryHandler
from ordercore.domain.exceptions import DomainException, StorageError
from ordercore.infrastructure.bootstrap import (
    Settings,
    inventory_repository,
    product_repository,
)


def _provision_handler(settings: Settings) -> ProvisionInventoryHandler:
    return ProvisionInventoryHandler(
        inventory_repo=inventory_repository(settings),
        catalog=product_repository(settings),
    )


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units in stock.")
@click.option("--location", default="", help="Where the stock is kept.")
@click.pass_obj
def inventory_add(settings: Settings, product_id: str, quantity: int, location: str) -> None:
    """Create the stock record for a product."""
    try:
        dto = _provision_handler(settings).handle(product_id, quantity, location)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory for '{dto.product_id}' created with {dto.quantity} units")


@click.command("adjust")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--delta", required=True, type=int, help="Units to add (positive) or remove (negative).")
@click.pass_obj
def inventory_adjust(settings: Settings, product_id: str, delta: int) -> None:
    """Correct a product's stock by hand."""
    try:
        dto = _provision_handler(settings).adjust(product_id, delta)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory for '{dto.product_id}' is now {dto.quantity}")


@click.command("relocate")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--location", required=True, help="New location.")
@click.pass_obj
def inventory_relocate(settings: Settings, product_id: str, location: str) -> None:
    """Move a product's stock to another location."""
    try:
        dto = _provision_handler(settings).relocate(product_id, location)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory for '{dto.product_id}' moved to {dto.location}")


@click.command("show")
@click.option("--product", "product_id", default=None, help="Only this product.")
@click.pass_obj
def inventory_show(settings: Settings, product_id: str | None) -> None:
    """Show current stock levels."""
    handler = ShowInventoryHandler(inventory_repo=inventory_repository(settings))

    try:
        lines = [handler.handle_one(product_id)] if product_id else handler.handle()
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(f"{'Product':<20} {'Quantity':>10} {'Location':<20}")
    click.echo("-" * 52)
    for line in lines:
        click.echo(f"{line.product_id:<20} {line.quantity:>10} {line.location:<20}")
