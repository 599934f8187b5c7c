"""Application service: stock provisioning and manual corrections.

Creating a stock row, correcting its quantity and moving it all go
through the InventoryLedger, like every other stock change.
"""

from __future__ import annotations

from ordercore.application.dto import InventoryDTO, inventory_to_dto
from ordercore.domain.exceptions import EntityNotFoundError
from ordercore.domain.repository.catalog import ProductCatalog
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.domain.service.inventory_ledger import InventoryLedger


class ProvisionInventoryHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        catalog: ProductCatalog,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._ledger = InventoryLedger(inventory_repo)
        self._catalog = catalog

    def handle(self, product_id: str, quantity: int, location: str = "") -> InventoryDTO:
        """Create the stock row for a catalog product."""
        if self._catalog.get_product(product_id) is None:
            raise EntityNotFoundError(f"Product not found with ID: {product_id}")
        record = self._ledger.provision(product_id, quantity, location)
        return inventory_to_dto(record)

    def adjust(self, product_id: str, delta: int) -> InventoryDTO:
        """Add (positive *delta*) or remove (negative) stock by hand."""
        self._ledger.adjust(product_id, delta)
        return self._current(product_id)

    def relocate(self, product_id: str, location: str) -> InventoryDTO:
        return inventory_to_dto(self._ledger.relocate(product_id, location))

    def _current(self, product_id: str) -> InventoryDTO:
        record = self._inventory_repo.get_by_product_id(product_id)
        if record is None:
            raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
        return inventory_to_dto(record)
