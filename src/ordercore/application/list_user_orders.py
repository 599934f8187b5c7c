"""Application service: List a user's orders (query)."""

from __future__ import annotations

from ordercore.application.dto import OrderDTO, order_to_dto
from ordercore.domain.exceptions import EntityNotFoundError
from ordercore.domain.repository.catalog import UserDirectory
from ordercore.domain.repository.order_repository import OrderRepository


class ListUserOrdersHandler:

    def __init__(self, order_repo: OrderRepository, users: UserDirectory) -> None:
        self._order_repo = order_repo
        self._users = users

    def handle(self, user_id: str) -> list[OrderDTO]:
        if self._users.get_user(user_id) is None:
            raise EntityNotFoundError(f"User not found with ID: {user_id}")
        orders = sorted(self._order_repo.list_by_user(user_id), key=lambda o: o.id or 0)
        return [order_to_dto(order) for order in orders]
