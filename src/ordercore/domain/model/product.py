"""Product as seen by the ordering core.

The catalog owns products; the core only reads them to take a price
snapshot and to check that the product may be ordered at all.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.value_objects import Money


@dataclass
class Product:
    """A catalog entry.

    ``available`` is the catalog's orderable flag, independent of stock:
    a product can be in stock and still be withdrawn from sale.
    """

    id: str
    name: str
    price: Money
    available: bool = True

    def __post_init__(self) -> None:
        _check_price(self.price)

    def update_price(self, new_price: Money) -> None:
        """Change the catalog price.

        Existing orders are unaffected: line items hold their own
        price snapshot.
        """
        _check_price(new_price)
        self.price = new_price


def _check_price(price: Money) -> None:
    if price.amount <= 0:
        raise ValidationError("Product price must be greater than zero")
