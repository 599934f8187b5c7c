"""Application service: Transition Order Status use case.

Applies a requested status change under the lifecycle rules.  The new
status is stored with a compare-and-set against the status the order was
loaded with, so of two requests racing on the same order only one wins.

Moving a live order to CANCELLED claims the status first and only then
gives the stock back through the ledger.  Stock is therefore never
returned for an order that another request has meanwhile shipped or
delivered.  If releasing fails, the previous status is put back and a
retry releases only the lines that were not released yet.
"""

from __future__ import annotations

import dataclasses

import structlog

from ordercore.application.dto import OrderDTO, order_to_dto
from ordercore.domain.exceptions import EntityNotFoundError, ValidationError
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.model.order import Order
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


def parse_status(raw: OrderStatus | str) -> OrderStatus:
    if isinstance(raw, OrderStatus):
        return raw
    try:
        return OrderStatus(raw.strip().upper())
    except (ValueError, AttributeError) as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Unknown order status {raw!r} (expected one of {allowed})"
        ) from exc


class TransitionOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = InventoryLedger(inventory_repo)

    def handle(self, order_id: int, new_status: OrderStatus | str) -> OrderDTO:
        target = parse_status(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        before = dataclasses.replace(order)
        releases_stock = target == OrderStatus.CANCELLED and order.holds_reservations

        if not order.transition_to(target):
            logger.debug("order_status_unchanged", order_id=order_id, status=target.value)
            return order_to_dto(order)

        self._order_repo.update_status(order, expected=before.status)

        if releases_stock:
            self._release_or_restore(order, before)

        logger.info(
            "order_status_changed",
            order_id=order_id,
            previous=before.status.value,
            status=target.value,
        )
        return order_to_dto(order)

    def _release_or_restore(self, order: Order, before: Order) -> None:
        try:
            self._ledger.release_for_order(order)
        except Exception as exc:
            logger.warning(
                "order_cancellation_reverted",
                order_id=order.id,
                status=before.status.value,
                reason=str(exc),
            )
            self._order_repo.update_status(before, expected=OrderStatus.CANCELLED)
            raise
