"""Application service: Cancel Order use case.

Shorthand for a transition to CANCELLED.  A live order gets its reserved
stock back; an order that is already DELIVERED or CANCELLED is refused
with InvalidTransitionError.
"""

from __future__ import annotations

from ordercore.application.dto import OrderDTO
from ordercore.application.transition_order_status import TransitionOrderStatusHandler
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.domain.repository.order_repository import OrderRepository


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
    ) -> None:
        self._transition = TransitionOrderStatusHandler(order_repo, inventory_repo)

    def handle(self, order_id: int) -> OrderDTO:
        return self._transition.handle(order_id, OrderStatus.CANCELLED)
