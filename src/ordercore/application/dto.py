"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between callers (CLI, service layer) and the application
handlers without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.model.inventory import InventoryRecord
from ordercore.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the user asked for (product id + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    user_id: str
    status: str
    items: list[OrderLineItemDTO]
    total: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class InventoryDTO:
    product_id: str
    quantity: int
    location: str


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        total=str(order.total_amount),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        updated_at=order.updated_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def inventory_to_dto(record: InventoryRecord) -> InventoryDTO:
    return InventoryDTO(
        product_id=record.product_id,
        quantity=record.quantity,
        location=record.location,
    )
