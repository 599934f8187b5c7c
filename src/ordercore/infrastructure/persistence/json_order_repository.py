"""JSON-file-backed implementation of OrderRepository.

An order is stored as one JSON object with its line items nested inside,
so adding an order and its items is a single file write.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ordercore.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    StorageError,
    ValidationError,
)
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.model.order import Order, OrderLineItem
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def list_by_user(self, user_id: str) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if raw["user_id"] == user_id
        ]

    def add(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()
            order_id = max((o["id"] for o in orders), default=0) + 1
            orders.append(self._to_raw(order, order_id))
            self._file.persist(orders)
        order.id = order_id

    def update_status(self, order: Order, expected: OrderStatus) -> None:
        with self._file.locked():
            orders = self._file.load()
            for raw in orders:
                if raw["id"] == order.id:
                    if raw["status"] != expected.value:
                        raise InvalidTransitionError(
                            OrderStatus(raw["status"]),
                            order.status,
                            "the order was changed by another request",
                        )
                    raw["status"] = order.status.value
                    raw["updated_at"] = order.updated_at.isoformat()
                    break
            else:
                raise EntityNotFoundError(f"Order #{order.id} not found")
            self._file.persist(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order, order_id: int) -> dict:
        return {
            "id": order_id,
            "user_id": order.user_id,
            "status": order.status.value,
            "total_amount": str(order.total_amount.amount),
            "currency": order.total_amount.currency,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        try:
            items = [
                OrderLineItem(
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "USD")),
                )
                for i in raw["items"]
            ]
            order = Order(
                id=raw["id"],
                user_id=raw["user_id"],
                items=items,
                total_amount=Money(Decimal(raw["total_amount"]), raw.get("currency", "USD")),
                status=OrderStatus(raw["status"]),
                created_at=datetime.fromisoformat(raw["created_at"]),
                updated_at=datetime.fromisoformat(raw["updated_at"]),
            )
            order.check_total()
        except (KeyError, ValueError, ValidationError) as exc:
            raise StorageError(f"Corrupt order record #{raw.get('id')}: {exc}") from exc
        return order
