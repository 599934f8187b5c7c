"""Application service: List every order (query)."""

from __future__ import annotations

from ordercore.application.dto import OrderDTO, order_to_dto
from ordercore.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self) -> list[OrderDTO]:
        orders = sorted(self._order_repo.list_all(), key=lambda o: o.id or 0)
        return [order_to_dto(order) for order in orders]
