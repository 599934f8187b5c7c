"""Order lifecycle — statuses and the rules for moving between them.

Only finality is enforced:

- CANCELLED accepts no transition at all, not even to itself.
- DELIVERED accepts only DELIVERED again (an idempotent no-op).
- Nothing returns to PENDING once an order has left it.

Every other pair of non-terminal statuses is allowed in either direction.
"""

from __future__ import annotations

from enum import Enum

from ordercore.domain.exceptions import InvalidTransitionError


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Raise InvalidTransitionError if ``current -> target`` is illegal."""
    if current == OrderStatus.CANCELLED:
        raise InvalidTransitionError(
            current, target, "a cancelled order is final"
        )
    if current == OrderStatus.DELIVERED and target != OrderStatus.DELIVERED:
        raise InvalidTransitionError(
            current, target, "a delivered order is final"
        )
    if target == INITIAL_STATUS and current != INITIAL_STATUS:
        raise InvalidTransitionError(
            current, target, "an order cannot return to its initial status"
        )


def is_noop(current: OrderStatus, target: OrderStatus) -> bool:
    return current == target
