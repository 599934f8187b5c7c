"""JSON-file-backed product catalog."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from ordercore.domain.model.product import Product
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.catalog import ProductCatalog
from ordercore.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductCatalog):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- ProductCatalog interface ---------------------------------------------

    def get_product(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    # --- Catalog maintenance --------------------------------------------------

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._file.locked():
            products = self._load()
            products[product.id] = product
            self._persist(products)

    # --- File helpers ---------------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {
            item["id"]: Product(
                id=item["id"],
                name=item["name"],
                price=Money(Decimal(item["price"]), item.get("currency", "USD")),
                available=item.get("available", True),
            )
            for item in self._file.load()
        }

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [
            {
                "id": p.id,
                "name": p.name,
                "price": str(p.price.amount),
                "currency": p.price.currency,
                "available": p.available,
            }
            for p in products.values()
        ]
        self._file.persist(raw)
