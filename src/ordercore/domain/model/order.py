"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items.  Line items are
written once, at creation, and never change; after that the only mutable
part of an order is its status, which moves under the lifecycle rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.lifecycle import (
    INITIAL_STATUS,
    OrderStatus,
    check_transition,
    is_noop,
)
from ordercore.domain.model.value_objects import Money, Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLineItem:
    """One product on an order, with the price captured at creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # snapshot, immune to later catalog changes

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


def sum_line_totals(items: list[OrderLineItem]) -> Money:
    if not items:
        return Money.zero()
    result = Money.zero(items[0].unit_price.currency)
    for item in items:
        result = result + item.line_total
    return result


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders — it enforces the creation rules
    and computes ``total_amount``.  The ``__init__`` stays simple so
    repositories can reconstitute persisted orders without re-validating.

    Invariants:
    - ``total_amount`` equals the sum of the line totals
    - a committed order has at least one line item
    """

    id: int | None
    user_id: str
    items: list[OrderLineItem]
    total_amount: Money
    status: OrderStatus = INITIAL_STATUS
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def create(user_id: str, items: list[OrderLineItem]) -> Order:
        """Create a new PENDING order from already-priced line items."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = _utcnow()
        return Order(
            id=None,
            user_id=user_id,
            items=list(items),
            total_amount=sum_line_totals(items),
            status=INITIAL_STATUS,
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus) -> bool:
        """Move to *target*, returning False when the move is a no-op.

        Raises InvalidTransitionError when the lifecycle forbids the move;
        the order is left untouched in that case.
        """
        check_transition(self.status, target)
        if is_noop(self.status, target):
            return False
        self.status = target
        self.updated_at = _utcnow()
        return True

    # --- Computed properties --------------------------------------------------

    @property
    def holds_reservations(self) -> bool:
        """True while cancelling would have stock to give back."""
        return not self.status.is_terminal

    def check_total(self) -> None:
        computed = sum_line_totals(self.items)
        if computed != self.total_amount:
            raise ValidationError(
                f"Order #{self.id} total {self.total_amount} does not match "
                f"its line items ({computed})"
            )
