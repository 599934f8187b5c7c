"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from ordercore.application.cancel_order import CancelOrderHandler
from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dto import OrderDTO, OrderItemSpec
from ordercore.application.list_orders import ListOrdersHandler
from ordercore.application.list_user_orders import ListUserOrdersHandler
from ordercore.application.show_order import ShowOrderHandler
from ordercore.application.transition_order_status import TransitionOrderStatusHandler
from ordercore.domain.exceptions import DomainException, StorageError
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.infrastructure.bootstrap import (
    Settings,
    inventory_repository,
    order_repository,
    product_repository,
    user_repository,
)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'P1:3,P2:1' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Updated:  {dto.updated_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("create")
@click.option("--user", "user_id", required=True, help="User ID placing the order.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.pass_obj
def order_create(settings: Settings, user_id: str, items: str) -> None:
    """Create a new order (reserves stock)."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        order_repo=order_repository(settings),
        inventory_repo=inventory_repository(settings),
        catalog=product_repository(settings),
        users=user_repository(settings),
    )

    try:
        dto = handler.handle(user_id=user_id, item_specs=specs)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(settings: Settings, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository(settings))

    try:
        dto = handler.handle(order_id)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", default=None, help="Only this user's orders.")
@click.pass_obj
def order_list(settings: Settings, user_id: str | None) -> None:
    """List orders, optionally for one user."""
    try:
        if user_id is None:
            dtos = ListOrdersHandler(order_repo=order_repository(settings)).handle()
        else:
            dtos = ListUserOrdersHandler(
                order_repo=order_repository(settings),
                users=user_repository(settings),
            ).handle(user_id)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    if not dtos:
        click.echo(f"No orders for user '{user_id}'." if user_id else "No orders found.")
        return

    click.echo(f"{'ID':<6} {'User':<10} {'Status':<12} {'Lines':>5} {'Total':>12}")
    click.echo("-" * 49)
    for dto in dtos:
        click.echo(
            f"{dto.id:<6} {dto.user_id:<10} {dto.status:<12} {len(dto.items):>5} {dto.total:>12}"
        )


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="Target status.",
)
@click.pass_obj
def order_status(settings: Settings, order_id: int, new_status: str) -> None:
    """Move an order to a new status (CANCELLED releases stock)."""
    handler = TransitionOrderStatusHandler(
        order_repo=order_repository(settings),
        inventory_repo=inventory_repository(settings),
    )

    try:
        dto = handler.handle(order_id, new_status)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.pass_obj
def order_cancel(settings: Settings, order_id: int) -> None:
    """Cancel an order (returns its stock)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(settings),
        inventory_repo=inventory_repository(settings),
    )

    try:
        handler.handle(order_id)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled, stock released.")
