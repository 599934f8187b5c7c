"""Tests for the JSON-file repositories, using pytest's tmp_path."""

import json
import os
import subprocess
import sys
import threading
from pathlib import Path

import pytest

from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dto import OrderItemSpec
from ordercore.application.transition_order_status import TransitionOrderStatusHandler
from ordercore.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    InsufficientStockError,
    InvalidTransitionError,
    OutOfStockError,
    StorageError,
)
from ordercore.domain.model.inventory import InventoryRecord
from ordercore.domain.model.lifecycle import OrderStatus
from ordercore.domain.model.order import Order, OrderLineItem
from ordercore.domain.model.product import Product
from ordercore.domain.model.user import User
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.service.inventory_ledger import InventoryLedger
from ordercore.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from ordercore.infrastructure.persistence.json_order_repository import JsonOrderRepository
from ordercore.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from ordercore.infrastructure.persistence.json_user_repository import JsonUserRepository


_RESERVE_IN_CHILD = """
import sys
from pathlib import Path

from ordercore.domain.exceptions import InsufficientStockError
from ordercore.domain.service.inventory_ledger import InventoryLedger
from ordercore.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)

ledger = InventoryLedger(JsonInventoryRepository(Path(sys.argv[1])))
granted = 0
for _ in range(int(sys.argv[2])):
    try:
        ledger.reserve("P1", 1)
        granted += 1
    except InsufficientStockError:
        pass
print(granted)
"""


def _order(user_id: str = "U1") -> Order:
    return Order.create(user_id, [
        OrderLineItem("P1", "Lamp", Quantity(3), Money.of("20.00")),
        OrderLineItem("P2", "Bulb", Quantity(1), Money.of("5.00")),
    ])


class TestJsonInventoryRepository:

    def test_creates_empty_file(self, tmp_path):
        JsonInventoryRepository(tmp_path / "inventory.json")
        doc = json.loads((tmp_path / "inventory.json").read_text())
        assert doc == {"records": [], "releases": []}

    def test_add_and_get(self, tmp_path):
        repo = JsonInventoryRepository(tmp_path / "inventory.json")
        repo.add(InventoryRecord("P1", 10, "A1"))
        assert repo.get_by_product_id("P1") == InventoryRecord("P1", 10, "A1")
        assert repo.get_by_product_id("P2") is None

    def test_add_duplicate_rejected(self, tmp_path):
        repo = JsonInventoryRepository(tmp_path / "inventory.json")
        repo.add(InventoryRecord("P1", 10))
        with pytest.raises(DuplicateEntityError):
            repo.add(InventoryRecord("P1", 3))

    def test_conditional_decrement(self, tmp_path):
        repo = JsonInventoryRepository(tmp_path / "inventory.json")
        repo.add(InventoryRecord("P1", 5))
        assert repo.decrement_if_available("P1", 5) == 0
        assert repo.decrement_if_available("P1", 1) is None
        assert repo.get_by_product_id("P1").quantity == 0

    def test_decrement_missing_row(self, tmp_path):
        repo = JsonInventoryRepository(tmp_path / "inventory.json")
        with pytest.raises(EntityNotFoundError):
            repo.decrement_if_available("P1", 1)

    def test_keyed_increment_survives_reopen(self, tmp_path):
        path = tmp_path / "inventory.json"
        repo = JsonInventoryRepository(path)
        repo.add(InventoryRecord("P1", 5))
        assert repo.increment("P1", 2, release_key="order:1:line:0") == 7

        reopened = JsonInventoryRepository(path)
        assert reopened.increment("P1", 2, release_key="order:1:line:0") is None
        assert reopened.get_by_product_id("P1").quantity == 7

    def test_set_location(self, tmp_path):
        repo = JsonInventoryRepository(tmp_path / "inventory.json")
        repo.add(InventoryRecord("P1", 5, "A1"))
        repo.set_location("P1", "B2")
        assert repo.get_by_product_id("P1") == InventoryRecord("P1", 5, "B2")

    def test_corrupt_file_reported_as_storage_error(self, tmp_path):
        path = tmp_path / "inventory.json"
        path.write_text("{not json", encoding="utf-8")
        repo = JsonInventoryRepository(path)
        with pytest.raises(StorageError, match="Cannot read"):
            repo.list_all()

    def test_concurrent_reservations_never_overdraw(self, tmp_path):
        path = tmp_path / "inventory.json"
        JsonInventoryRepository(path).add(InventoryRecord("P1", 10))
        errors = []

        def worker():
            # each thread has its own repository instance on the same file
            ledger = InventoryLedger(JsonInventoryRepository(path))
            for _ in range(3):
                try:
                    ledger.reserve("P1", 1)
                except InsufficientStockError as exc:
                    errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert JsonInventoryRepository(path).get_by_product_id("P1").quantity == 0
        assert len(errors) == 8

    def test_concurrent_processes_never_overdraw(self, tmp_path):
        path = tmp_path / "inventory.json"
        JsonInventoryRepository(path).add(InventoryRecord("P1", 100))
        src = Path(__file__).resolve().parents[2] / "src"
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join([str(src), env.get("PYTHONPATH", "")])

        children = [
            subprocess.Popen(
                [sys.executable, "-c", _RESERVE_IN_CHILD, str(path), "40"],
                stdout=subprocess.PIPE,
                text=True,
                env=env,
            )
            for _ in range(4)
        ]
        granted = []
        for child in children:
            out, _ = child.communicate(timeout=120)
            assert child.returncode == 0
            granted.append(int(out.strip().splitlines()[-1]))

        assert sum(granted) == 100
        assert JsonInventoryRepository(path).get_by_product_id("P1").quantity == 0


class TestJsonOrderRepository:

    def test_add_assigns_ids(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        first, second = _order(), _order()
        repo.add(first)
        repo.add(second)
        assert (first.id, second.id) == (1, 2)

    def test_round_trip(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()
        repo.add(order)

        loaded = repo.get_by_id(order.id)

        assert loaded == order
        assert loaded.total_amount == Money.of("65.00")

    def test_update_status_keeps_items(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()
        repo.add(order)
        order.transition_to(OrderStatus.SHIPPED)

        repo.update_status(order, expected=OrderStatus.PENDING)

        loaded = repo.get_by_id(order.id)
        assert loaded.status == OrderStatus.SHIPPED
        assert loaded.items == order.items

    def test_update_unknown_order(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()
        order.id = 42
        with pytest.raises(EntityNotFoundError):
            repo.update_status(order, expected=OrderStatus.PENDING)

    def test_update_with_stale_status_rejected(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        order = _order()
        repo.add(order)
        order.transition_to(OrderStatus.CANCELLED)
        repo.update_status(order, expected=OrderStatus.PENDING)

        stale = repo.get_by_id(order.id)
        stale.status = OrderStatus.PENDING
        stale.transition_to(OrderStatus.DELIVERED)
        with pytest.raises(InvalidTransitionError, match="from CANCELLED to DELIVERED"):
            repo.update_status(stale, expected=OrderStatus.PENDING)
        assert repo.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_list_all(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        for user_id in ("U2", "U1"):
            repo.add(_order(user_id))
        assert [(o.id, o.user_id) for o in repo.list_all()] == [(1, "U2"), (2, "U1")]

    def test_list_by_user(self, tmp_path):
        repo = JsonOrderRepository(tmp_path / "orders.json")
        for user_id in ("U1", "U2", "U1"):
            repo.add(_order(user_id))
        assert [o.id for o in repo.list_by_user("U1")] == [1, 3]

    def test_tampered_total_detected(self, tmp_path):
        path = tmp_path / "orders.json"
        repo = JsonOrderRepository(path)
        repo.add(_order())
        raw = json.loads(path.read_text())
        raw[0]["total_amount"] = "1.00"
        path.write_text(json.dumps(raw))

        with pytest.raises(StorageError, match="Corrupt order"):
            repo.get_by_id(1)


class TestJsonCatalog:

    def test_products(self, tmp_path):
        repo = JsonProductRepository(tmp_path / "products.json")
        repo.save(Product("P1", "Lamp", Money.of("20.00"), available=False))
        product = repo.get_product("P1")
        assert product.price == Money.of("20.00")
        assert product.available is False
        assert repo.get_product("P9") is None

    def test_users(self, tmp_path):
        repo = JsonUserRepository(tmp_path / "users.json")
        repo.save(User("U1", "Alice"))
        repo.save(User("U1", "Alice B."))
        assert repo.get_user("U1") == User("U1", "Alice B.")
        assert len(repo.list_all()) == 1


class TestJsonEndToEnd:

    def test_create_fail_and_cancel(self, tmp_path):
        products = JsonProductRepository(tmp_path / "products.json")
        products.save(Product("P1", "Lamp", Money.of("20.00")))
        products.save(Product("P2", "Bulb", Money.of("5.00")))
        users = JsonUserRepository(tmp_path / "users.json")
        users.save(User("U1", "Alice"))
        inventory = JsonInventoryRepository(tmp_path / "inventory.json")
        inventory.add(InventoryRecord("P1", 10))
        inventory.add(InventoryRecord("P2", 2))
        orders = JsonOrderRepository(tmp_path / "orders.json")

        create = CreateOrderHandler(orders, inventory, products, users)
        transition = TransitionOrderStatusHandler(orders, inventory)

        with pytest.raises(OutOfStockError):
            create.handle("U1", [OrderItemSpec("P1", 2), OrderItemSpec("P2", 100000)])
        assert inventory.get_by_product_id("P1").quantity == 10
        assert orders.list_by_user("U1") == []

        dto = create.handle("U1", [OrderItemSpec("P1", 3), OrderItemSpec("P2", 1)])
        assert dto.total == "$65.00"
        assert inventory.get_by_product_id("P1").quantity == 7

        transition.handle(dto.id, OrderStatus.CANCELLED)
        assert inventory.get_by_product_id("P1").quantity == 10
        assert inventory.get_by_product_id("P2").quantity == 2
