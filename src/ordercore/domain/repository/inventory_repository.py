"""Abstract repository for InventoryRecord rows.

Besides plain lookups, implementations must provide the two atomic
primitives the ledger is built on.  Each one performs its
read-check-write as a single step against the store, so concurrent
callers touching the same product are serialized there.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.inventory import InventoryRecord


class InventoryRepository(ABC):

    @abstractmethod
    def get_by_product_id(self, product_id: str) -> InventoryRecord | None:
        """Return the stock row for a product, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryRecord]:
        """Return every stock row, ordered by product id."""

    @abstractmethod
    def add(self, record: InventoryRecord) -> None:
        """Insert a new stock row.

        Raises DuplicateEntityError if the product already has one.
        """

    @abstractmethod
    def set_location(self, product_id: str, location: str) -> None:
        """Change where the stock is kept.  The quantity is not touched.

        Raises EntityNotFoundError if the product has no row.
        """

    @abstractmethod
    def decrement_if_available(self, product_id: str, quantity: int) -> int | None:
        """Atomically subtract *quantity* if at least that much is in stock.

        Returns the new quantity, or None when stock is insufficient (and
        nothing was changed).  Raises EntityNotFoundError if the product
        has no row.
        """

    @abstractmethod
    def increment(
        self,
        product_id: str,
        quantity: int,
        release_key: str | None = None,
    ) -> int | None:
        """Atomically add *quantity* to stock.

        When *release_key* is given it is recorded together with the
        increment, and a later call with the same key changes nothing and
        returns None.  Otherwise returns the new quantity.  Raises
        EntityNotFoundError if the product has no row.
        """
