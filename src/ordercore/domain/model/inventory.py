"""InventoryRecord — one stock row per product.

Records are plain data.  Quantities change only through the
InventoryLedger, which goes through the repository's atomic primitives
so that the read-check-write on ``quantity`` is never split.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.exceptions import ValidationError


@dataclass
class InventoryRecord:
    """Stock on hand for a single product.

    Invariant: ``quantity`` is never negative.
    """

    product_id: str
    quantity: int
    location: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError(
                f"Stock quantity must be an integer, got {type(self.quantity).__name__}"
            )
        if self.quantity < 0:
            raise ValidationError(
                f"Stock quantity for product '{self.product_id}' cannot be negative"
            )
