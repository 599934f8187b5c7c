"""JSON-file-backed implementation of InventoryRepository.

The document holds the stock rows and the set of release keys already
applied, so an increment and the bookkeeping of its key are a single
write.
"""

from __future__ import annotations

from pathlib import Path

from ordercore.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from ordercore.domain.model.inventory import InventoryRecord
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.infrastructure.persistence.json_file import JsonFile


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty={"records": [], "releases": []})

    # --- InventoryRepository interface ----------------------------------------

    def get_by_product_id(self, product_id: str) -> InventoryRecord | None:
        raw = self._find(self._file.load(), product_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[InventoryRecord]:
        records = [self._to_domain(raw) for raw in self._file.load()["records"]]
        return sorted(records, key=lambda r: r.product_id)

    def add(self, record: InventoryRecord) -> None:
        with self._file.locked():
            doc = self._file.load()
            if self._find(doc, record.product_id) is not None:
                raise DuplicateEntityError(
                    f"Inventory already exists for product '{record.product_id}'"
                )
            doc["records"].append(self._to_raw(record))
            self._file.persist(doc)

    def set_location(self, product_id: str, location: str) -> None:
        with self._file.locked():
            doc = self._file.load()
            self._require(doc, product_id)["location"] = location
            self._file.persist(doc)

    def decrement_if_available(self, product_id: str, quantity: int) -> int | None:
        with self._file.locked():
            doc = self._file.load()
            raw = self._require(doc, product_id)
            if raw["quantity"] < quantity:
                return None
            raw["quantity"] -= quantity
            self._file.persist(doc)
            return raw["quantity"]

    def increment(
        self,
        product_id: str,
        quantity: int,
        release_key: str | None = None,
    ) -> int | None:
        with self._file.locked():
            doc = self._file.load()
            raw = self._require(doc, product_id)
            if release_key is not None:
                if release_key in doc["releases"]:
                    return None
                doc["releases"].append(release_key)
            raw["quantity"] += quantity
            self._file.persist(doc)
            return raw["quantity"]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _find(doc: dict, product_id: str) -> dict | None:
        for raw in doc["records"]:
            if raw["product_id"] == product_id:
                return raw
        return None

    def _require(self, doc: dict, product_id: str) -> dict:
        raw = self._find(doc, product_id)
        if raw is None:
            raise EntityNotFoundError(f"No inventory record for product '{product_id}'")
        return raw

    @staticmethod
    def _to_raw(record: InventoryRecord) -> dict:
        return {
            "product_id": record.product_id,
            "quantity": record.quantity,
            "location": record.location,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryRecord:
        return InventoryRecord(
            product_id=raw["product_id"],
            quantity=raw["quantity"],
            location=raw.get("location", ""),
        )
