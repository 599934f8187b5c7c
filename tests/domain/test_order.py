"""Unit tests for the Order aggregate and its business rules."""

from decimal import Decimal

import pytest

from ordercore.domain.exceptions import InvalidTransitionError, ValidationError
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.model.order import Order, OrderLineItem
from ordercore.domain.model.value_objects import Money, Quantity


def _make_item(product_id: str = "P1", qty: int = 1, price: str = "15.00") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(user_id="U1", items=[_make_item(qty=2, price="10.00")])
        assert order.user_id == "U1"
        assert order.status == OrderStatus.PENDING
        assert len(order.items) == 1
        assert order.total_amount == Money.of("20.00")

    def test_id_is_none_for_new_orders(self):
        order = Order.create("U1", [_make_item()])
        assert order.id is None  # assigned by repository

    def test_total_is_sum_of_line_items(self):
        order = Order.create("U1", [
            _make_item("A", qty=2, price="10.0"),
            _make_item("B", qty=1, price="5.0"),
        ])
        assert order.total_amount == Money.of("25.0")

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("U1", [])

    def test_timestamps_set(self):
        order = Order.create("U1", [_make_item()])
        assert order.created_at == order.updated_at
        assert order.created_at.tzinfo is not None

    def test_check_total_detects_mismatch(self):
        order = Order.create("U1", [_make_item(qty=2, price="10.00")])
        order.total_amount = Money.of("999")
        with pytest.raises(ValidationError, match="does not match"):
            order.check_total()


class TestOrderLineItem:

    def test_line_total_calculation(self):
        assert _make_item(qty=3, price="15.00").line_total == Money.of("45.00")

    def test_line_item_is_immutable(self):
        item = _make_item()
        with pytest.raises(AttributeError):
            item.unit_price = Money.of("1.00")

    def test_price_is_snapshot(self):
        """The line item holds its own price copy."""
        item = _make_item(price="15.00")
        assert item.unit_price.amount == Decimal("15.00")


class TestOrderTransitions:

    def test_forward_transition(self):
        order = Order.create("U1", [_make_item()])
        assert order.transition_to(OrderStatus.PROCESSING) is True
        assert order.status == OrderStatus.PROCESSING
        assert order.updated_at >= order.created_at

    def test_cancel_from_pending(self):
        order = Order.create("U1", [_make_item()])
        assert order.transition_to(OrderStatus.CANCELLED) is True
        assert order.status == OrderStatus.CANCELLED

    def test_delivered_to_delivered_is_noop(self):
        order = Order.create("U1", [_make_item()])
        order.transition_to(OrderStatus.DELIVERED)
        stamp = order.updated_at
        assert order.transition_to(OrderStatus.DELIVERED) is False
        assert order.updated_at == stamp

    def test_illegal_transition_leaves_order_untouched(self):
        order = Order.create("U1", [_make_item()])
        order.transition_to(OrderStatus.CANCELLED)
        with pytest.raises(InvalidTransitionError):
            order.transition_to(OrderStatus.PROCESSING)
        assert order.status == OrderStatus.CANCELLED

    def test_holds_reservations_until_terminal(self):
        order = Order.create("U1", [_make_item()])
        assert order.holds_reservations
        order.transition_to(OrderStatus.SHIPPED)
        assert order.holds_reservations
        order.transition_to(OrderStatus.DELIVERED)
        assert not order.holds_reservations
