"""SQL implementation of OrderRepository.

An order row and its item rows are inserted in the same transaction.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Session, sessionmaker

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
from ordercore.infrastructure.persistence.sql.database import as_utc, transaction
from ordercore.infrastructure.persistence.sql.models import OrderItemRow, OrderRow

_orders = OrderRow.__table__


class SqlOrderRepository(OrderRepository):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_id(self, order_id: int) -> Order | None:
        with transaction(self._session_factory) as session:
            row = session.get(OrderRow, order_id)
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Order]:
        with transaction(self._session_factory) as session:
            rows = session.scalars(sa.select(OrderRow).order_by(OrderRow.id))
            return [self._to_domain(row) for row in rows]

    def list_by_user(self, user_id: str) -> list[Order]:
        with transaction(self._session_factory) as session:
            rows = session.scalars(
                sa.select(OrderRow).where(OrderRow.user_id == user_id).order_by(OrderRow.id)
            )
            return [self._to_domain(row) for row in rows]

    def add(self, order: Order) -> None:
        with transaction(self._session_factory) as session:
            row = OrderRow(
                user_id=order.user_id,
                status=order.status.value,
                total_amount=order.total_amount.amount,
                currency=order.total_amount.currency,
                created_at=order.created_at,
                updated_at=order.updated_at,
                items=[
                    OrderItemRow(
                        line_no=index,
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=item.quantity.value,
                        unit_price=item.unit_price.amount,
                        currency=item.unit_price.currency,
                    )
                    for index, item in enumerate(order.items)
                ],
            )
            session.add(row)
            session.flush()
            order_id = row.id
        order.id = order_id

    def update_status(self, order: Order, expected: OrderStatus) -> None:
        with transaction(self._session_factory) as session:
            result = session.execute(
                sa.update(_orders)
                .where(_orders.c.id == order.id, _orders.c.status == expected.value)
                .values(status=order.status.value, updated_at=order.updated_at)
            )
            if result.rowcount == 1:
                return
            current = session.execute(
                sa.select(_orders.c.status).where(_orders.c.id == order.id)
            ).scalar_one_or_none()
        if current is None:
            raise EntityNotFoundError(f"Order #{order.id} not found")
        raise InvalidTransitionError(
            OrderStatus(current), order.status, "the order was changed by another request"
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        try:
            order = Order(
                id=row.id,
                user_id=row.user_id,
                items=[
                    OrderLineItem(
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=Quantity(item.quantity),
                        unit_price=Money(item.unit_price, item.currency),
                    )
                    for item in row.items
                ],
                total_amount=Money(row.total_amount, row.currency),
                status=OrderStatus(row.status),
                created_at=as_utc(row.created_at),
                updated_at=as_utc(row.updated_at),
            )
            order.check_total()
        except (ValueError, ValidationError) as exc:
            raise StorageError(f"Corrupt order record #{row.id}: {exc}") from exc
        return order
