"""CLI commands for the local product catalog and user directory.

The ordering core only reads products and users; these commands exist so
a local JSON or SQLite store can be seeded by hand.
"""

from __future__ import annotations

import click

from ordercore.domain.exceptions import (
    DomainException,
    DuplicateEntityError,
    EntityNotFoundError,
    StorageError,
)
from ordercore.domain.model.product import Product
from ordercore.domain.model.user import User
from ordercore.domain.model.value_objects import Money
from ordercore.infrastructure.bootstrap import Settings, product_repository, user_repository


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--unavailable", is_flag=True, default=False, help="Add as not orderable.")
@click.pass_obj
def product_add(
    settings: Settings, product_id: str, name: str, price: str, unavailable: bool
) -> None:
    """Add a product to the catalog."""
    repo = product_repository(settings)

    try:
        if repo.get_product(product_id) is not None:
            raise DuplicateEntityError(f"Product '{product_id}' already exists")
        product = Product(
            id=product_id, name=name.strip(), price=Money.of(price), available=not unavailable
        )
        repo.save(product)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
@click.pass_obj
def product_list(settings: Settings) -> None:
    """List all products in the catalog."""
    try:
        products = product_repository(settings).list_all()
    except StorageError as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<8} {'Name':<20} {'Price':>10} {'Available':>10}")
    click.echo("-" * 51)
    for p in products:
        click.echo(
            f"{p.id:<8} {p.name:<20} {str(p.price):>10} {'yes' if p.available else 'no':>10}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--available/--unavailable", default=None, help="Change the orderable flag.")
@click.pass_obj
def product_update(
    settings: Settings, product_id: str, price: str | None, available: bool | None
) -> None:
    """Change a product's price or availability.

    Existing orders keep the price they were created with.
    """
    repo = product_repository(settings)

    try:
        product = repo.get_product(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        if price is not None:
            product.update_price(Money.of(price))
        if available is not None:
            product.available = available
        repo.save(product)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} now {product.price}, available={product.available}")


@click.command("add")
@click.option("--id", "user_id", required=True, help="User ID.")
@click.option("--name", required=True, help="Display name.")
@click.pass_obj
def user_add(settings: Settings, user_id: str, name: str) -> None:
    """Add a user to the directory."""
    try:
        user_repository(settings).save(User(id=user_id, name=name.strip()))
    except StorageError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"User '{user_id}' added")


@click.command("list")
@click.pass_obj
def user_list(settings: Settings) -> None:
    """List all users."""
    try:
        users = user_repository(settings).list_all()
    except StorageError as exc:
        raise click.ClickException(str(exc))

    if not users:
        click.echo("No users found.")
        return

    for u in users:
        click.echo(f"{u.id:<8} {u.name}")
