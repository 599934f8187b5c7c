"""Unit tests for the order lifecycle rules."""

import pytest

from ordercore.domain.exceptions import ErrorKind, InvalidTransitionError
from ordercore.domain.model.lifecycle import OrderStatus, check_transition

NON_TERMINAL = [OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED]


class TestTerminalStatuses:

    def test_terminal_flags(self):
        assert OrderStatus.CANCELLED.is_terminal
        assert OrderStatus.DELIVERED.is_terminal
        assert not any(s.is_terminal for s in NON_TERMINAL)

    @pytest.mark.parametrize("target", list(OrderStatus))
    def test_cancelled_is_fully_final(self, target):
        with pytest.raises(InvalidTransitionError, match="cancelled order is final") as info:
            check_transition(OrderStatus.CANCELLED, target)
        assert info.value.kind == ErrorKind.INVALID_TRANSITION
        assert info.value.current == OrderStatus.CANCELLED
        assert info.value.requested == target

    @pytest.mark.parametrize(
        "target", [s for s in OrderStatus if s != OrderStatus.DELIVERED]
    )
    def test_delivered_rejects_other_statuses(self, target):
        with pytest.raises(InvalidTransitionError, match="delivered order is final"):
            check_transition(OrderStatus.DELIVERED, target)

    def test_delivered_to_delivered_allowed(self):
        check_transition(OrderStatus.DELIVERED, OrderStatus.DELIVERED)


class TestNonTerminalStatuses:

    @pytest.mark.parametrize("current", NON_TERMINAL)
    def test_cancel_always_allowed(self, current):
        check_transition(current, OrderStatus.CANCELLED)

    @pytest.mark.parametrize("current", NON_TERMINAL)
    def test_deliver_always_allowed(self, current):
        check_transition(current, OrderStatus.DELIVERED)

    def test_non_terminal_statuses_interchange_freely(self):
        check_transition(OrderStatus.PENDING, OrderStatus.SHIPPED)
        check_transition(OrderStatus.SHIPPED, OrderStatus.PROCESSING)
        check_transition(OrderStatus.PROCESSING, OrderStatus.SHIPPED)

    @pytest.mark.parametrize("current", [OrderStatus.PROCESSING, OrderStatus.SHIPPED])
    def test_no_return_to_initial_status(self, current):
        with pytest.raises(InvalidTransitionError, match="initial status"):
            check_transition(current, OrderStatus.PENDING)
