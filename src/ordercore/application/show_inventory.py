"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from ordercore.application.dto import InventoryDTO, inventory_to_dto
from ordercore.domain.exceptions import EntityNotFoundError
from ordercore.domain.repository.inventory_repository import InventoryRepository


class ShowInventoryHandler:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def handle(self) -> list[InventoryDTO]:
        return [inventory_to_dto(record) for record in self._inventory_repo.list_all()]

    def handle_one(self, product_id: str) -> InventoryDTO:
        record = self._inventory_repo.get_by_product_id(product_id)
        if record is None:
            raise EntityNotFoundError(f"Inventory not found for product ID: {product_id}")
        return inventory_to_dto(record)
