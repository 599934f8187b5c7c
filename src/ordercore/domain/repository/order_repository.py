"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, oldest first."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Order]:
        """Return a user's orders, oldest first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order together with all its line items.

        Either the order and every line item are stored, or nothing is.
        Assigns ``order.id``.
        """

    @abstractmethod
    def update_status(self, order: Order, expected: OrderStatus) -> None:
        """Persist the order's current status and ``updated_at``.

        The write only happens if the stored status is still *expected*;
        otherwise InvalidTransitionError is raised and nothing changes.
        Raises EntityNotFoundError if the order does not exist.  Line
        items and totals are never rewritten.
        """
