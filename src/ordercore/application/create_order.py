"""Application service: Create Order use case.

Turns a user id and a list of (product, quantity) requests into a
persisted PENDING order, or fails leaving stock exactly as it was.

Stock is reserved line by line as the request is walked.  Each single
reservation is atomic on its own; this handler makes the request as a
whole all-or-nothing by releasing every reservation it already holds
when a later line fails, or when the order cannot be stored.
"""

from __future__ import annotations

import structlog

from ordercore.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from ordercore.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    OutOfStockError,
    ProductUnavailableError,
    ValidationError,
)
from ordercore.domain.model.order import Order, OrderLineItem
from ordercore.domain.model.value_objects import Quantity
from ordercore.domain.repository.catalog import ProductCatalog, UserDirectory
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.service.inventory_ledger import InventoryLedger, Reservation

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        catalog: ProductCatalog,
        users: UserDirectory,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = InventoryLedger(inventory_repo)
        self._catalog = catalog
        self._users = users

    def handle(self, user_id: str, item_specs: list[OrderItemSpec]) -> OrderDTO:
        """Create a new order.

        Steps:
        1. Resolve the user (fail if not found).
        2. Reject an empty request or any non-positive quantity.
        3. For each line, in order: resolve the product, check it is
           orderable, reserve stock, build a line item with the *current*
           price (snapshot).
        4. Store the order and its line items as one unit.

        Any failure in 3 or 4 releases the reservations made so far.
        """
        if self._users.get_user(user_id) is None:
            raise EntityNotFoundError(f"User not found with ID: {user_id}")

        if not item_specs:
            raise ValidationError("Order must contain at least one item")
        quantities = [Quantity(spec.quantity) for spec in item_specs]

        reservations: list[Reservation] = []
        try:
            line_items = [
                self._reserve_line(spec.product_id, quantity, reservations)
                for spec, quantity in zip(item_specs, quantities)
            ]
            order = Order.create(user_id=user_id, items=line_items)
            self._order_repo.add(order)
        except Exception as exc:
            if reservations:
                logger.warning(
                    "order_creation_rolled_back",
                    user_id=user_id,
                    reason=str(exc),
                    error=type(exc).__name__,
                    released=len(reservations),
                )
                self._ledger.rollback(reservations)
            raise

        logger.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            total=str(order.total_amount),
            lines=len(order.items),
        )
        return order_to_dto(order)

    def _reserve_line(
        self,
        product_id: str,
        quantity: Quantity,
        reservations: list[Reservation],
    ) -> OrderLineItem:
        product = self._catalog.get_product(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found with ID: {product_id}")
        if not product.available:
            raise ProductUnavailableError(product.id, product.name)

        try:
            self._ledger.reserve(product.id, quantity.value)
        except InsufficientStockError as exc:
            raise OutOfStockError(
                product.id, quantity.value, exc.available, product.name
            ) from exc
        except EntityNotFoundError as exc:
            raise OutOfStockError(product.id, quantity.value, None, product.name) from exc
        reservations.append((product.id, quantity.value))

        return OrderLineItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,  # <-- price snapshot
        )
