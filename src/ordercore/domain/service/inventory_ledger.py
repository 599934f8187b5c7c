"""Domain service: Inventory Ledger.

The ledger is the only code that changes stock quantities.  Reservations
and releases are single atomic calls on the repository, so two orders
racing for the last units of a product can never jointly push stock
below zero.

Releasing is keyed: ``release_for_order`` tags each line with
``order:<id>:line:<n>`` and the repository refuses to apply the same key
twice.  A cancellation that failed half-way can therefore be retried
without returning more stock than the order took.
"""

from __future__ import annotations

import structlog

from ordercore.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from ordercore.domain.model.inventory import InventoryRecord
from ordercore.domain.model.order import Order
from ordercore.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)

Reservation = tuple[str, int]


def release_key_for(order_id: int, line_index: int) -> str:
    return f"order:{order_id}:line:{line_index}"


def _require_positive(quantity: int, what: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"{what} quantity must be a positive integer, got {quantity!r}")


class InventoryLedger:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    # --- Reservation ----------------------------------------------------------

    def reserve(self, product_id: str, quantity: int) -> int:
        """Take *quantity* units out of stock and return what is left.

        Raises EntityNotFoundError if the product has no stock row and
        InsufficientStockError if fewer than *quantity* units remain.
        """
        _require_positive(quantity, "Reservation")

        remaining = self._inventory_repo.decrement_if_available(product_id, quantity)
        if remaining is None:
            record = self._inventory_repo.get_by_product_id(product_id)
            available = record.quantity if record is not None else None
            raise InsufficientStockError(product_id, quantity, available)

        logger.debug(
            "inventory_reserved",
            product_id=product_id,
            quantity=quantity,
            remaining=remaining,
        )
        return remaining

    def release(
        self,
        product_id: str,
        quantity: int,
        release_key: str | None = None,
    ) -> int | None:
        """Put *quantity* units back into stock.

        Returns the new quantity, or None when nothing was applied: either
        the release key was already used or the product's stock row has
        disappeared.  The latter cannot be repaired here, so it is logged
        and dropped instead of failing the caller.
        """
        _require_positive(quantity, "Release")

        try:
            restored = self._inventory_repo.increment(product_id, quantity, release_key)
        except EntityNotFoundError:
            logger.warning(
                "inventory_release_dropped",
                product_id=product_id,
                quantity=quantity,
                release_key=release_key,
                reason="no inventory record",
            )
            return None

        if restored is None:
            logger.debug(
                "inventory_release_duplicate",
                product_id=product_id,
                release_key=release_key,
            )
            return None

        logger.debug(
            "inventory_released",
            product_id=product_id,
            quantity=quantity,
            quantity_after=restored,
            release_key=release_key,
        )
        return restored

    def rollback(self, reservations: list[Reservation]) -> None:
        """Undo reservations made earlier in the same operation, newest first.

        These were never attached to a committed order, so they are
        released without a key.  Every reservation is attempted even when
        an earlier release fails; the first failure is re-raised at the end.
        """
        first_failure: Exception | None = None
        for product_id, quantity in reversed(reservations):
            try:
                self.release(product_id, quantity)
            except Exception as exc:
                logger.error(
                    "order_rollback_release_failed",
                    product_id=product_id,
                    quantity=quantity,
                    reason=str(exc),
                )
                if first_failure is None:
                    first_failure = exc
        if first_failure is not None:
            raise first_failure

    def release_for_order(self, order: Order) -> None:
        """Return every line of *order* to stock, exactly once per line.

        Storage failures propagate; lines already released stay released
        and a retry skips them.
        """
        if order.id is None:
            raise ValidationError("Cannot release stock for an order that was never saved")

        for index, line in enumerate(order.items):
            self.release(
                line.product_id,
                line.quantity.value,
                release_key=release_key_for(order.id, index),
            )

    # --- Stock administration -------------------------------------------------

    def provision(self, product_id: str, quantity: int, location: str = "") -> InventoryRecord:
        """Create the stock row for a product that has none yet."""
        if self._inventory_repo.get_by_product_id(product_id) is not None:
            raise DuplicateEntityError(
                f"Inventory already exists for product '{product_id}'"
            )
        record = InventoryRecord(product_id=product_id, quantity=quantity, location=location)
        self._inventory_repo.add(record)
        logger.info(
            "inventory_provisioned",
            product_id=product_id,
            quantity=quantity,
            location=location,
        )
        return record

    def adjust(self, product_id: str, delta: int) -> int:
        """Apply a signed manual stock correction and return the new quantity."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(f"Adjustment must be an integer, got {delta!r}")
        if delta == 0:
            raise ValidationError("Adjustment must be non-zero")

        if delta < 0:
            remaining = self._inventory_repo.decrement_if_available(product_id, -delta)
            if remaining is None:
                record = self._inventory_repo.get_by_product_id(product_id)
                available = record.quantity if record is not None else None
                raise InsufficientStockError(product_id, -delta, available)
            new_quantity = remaining
        else:
            # increment only returns None for a repeated release key
            new_quantity = self._inventory_repo.increment(product_id, delta)

        logger.info(
            "inventory_adjusted",
            product_id=product_id,
            delta=delta,
            quantity_after=new_quantity,
        )
        return new_quantity  # type: ignore[return-value]

    def relocate(self, product_id: str, location: str) -> InventoryRecord:
        """Change where a product's stock is kept; the quantity is untouched."""
        self._inventory_repo.set_location(product_id, location)
        record = self._inventory_repo.get_by_product_id(product_id)
        if record is None:
            raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
        return record
