"""SQL implementation of InventoryRepository.

Reservation is a single conditional UPDATE::

    UPDATE inventory SET quantity = quantity - :n
     WHERE product_id = :p AND quantity >= :n

so the database serializes concurrent reservations of the same product
and an overdraw is impossible whatever the isolation level.
"""

from __future__ import annotations

from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from ordercore.domain.model.inventory import InventoryRecord
from ordercore.domain.repository.inventory_repository import InventoryRepository
from ordercore.infrastructure.persistence.sql.database import transaction
from ordercore.infrastructure.persistence.sql.models import InventoryReleaseRow, InventoryRow

_inventory = InventoryRow.__table__


class _AlreadyReleased(Exception):
    pass


class SqlInventoryRepository(InventoryRepository):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_product_id(self, product_id: str) -> InventoryRecord | None:
        with transaction(self._session_factory) as session:
            row = session.get(InventoryRow, product_id)
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[InventoryRecord]:
        with transaction(self._session_factory) as session:
            rows = session.scalars(sa.select(InventoryRow).order_by(InventoryRow.product_id))
            return [self._to_domain(row) for row in rows]

    def add(self, record: InventoryRecord) -> None:
        with transaction(self._session_factory) as session:
            if session.get(InventoryRow, record.product_id) is not None:
                raise DuplicateEntityError(
                    f"Inventory already exists for product '{record.product_id}'"
                )
            session.add(
                InventoryRow(
                    product_id=record.product_id,
                    quantity=record.quantity,
                    location=record.location,
                )
            )

    def set_location(self, product_id: str, location: str) -> None:
        with transaction(self._session_factory) as session:
            result = session.execute(
                sa.update(_inventory)
                .where(_inventory.c.product_id == product_id)
                .values(location=location)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError(f"No inventory record for product '{product_id}'")

    def decrement_if_available(self, product_id: str, quantity: int) -> int | None:
        with transaction(self._session_factory) as session:
            result = session.execute(
                sa.update(_inventory)
                .where(
                    _inventory.c.product_id == product_id,
                    _inventory.c.quantity >= quantity,
                )
                .values(quantity=_inventory.c.quantity - quantity)
            )
            if result.rowcount == 0:
                if self._quantity(session, product_id) is None:
                    raise EntityNotFoundError(
                        f"No inventory record for product '{product_id}'"
                    )
                return None
            return self._quantity(session, product_id)

    def increment(
        self,
        product_id: str,
        quantity: int,
        release_key: str | None = None,
    ) -> int | None:
        try:
            with transaction(self._session_factory) as session:
                if release_key is not None:
                    if session.get(InventoryReleaseRow, release_key) is not None:
                        return None
                    session.add(
                        InventoryReleaseRow(
                            release_key=release_key,
                            product_id=product_id,
                            quantity=quantity,
                            released_at=datetime.now(timezone.utc),
                        )
                    )
                    try:
                        session.flush()
                    except IntegrityError as exc:
                        # lost a race with a concurrent release using the same key
                        raise _AlreadyReleased() from exc

                result = session.execute(
                    sa.update(_inventory)
                    .where(_inventory.c.product_id == product_id)
                    .values(quantity=_inventory.c.quantity + quantity)
                )
                if result.rowcount == 0:
                    raise EntityNotFoundError(
                        f"No inventory record for product '{product_id}'"
                    )
                return self._quantity(session, product_id)
        except _AlreadyReleased:
            return None

    @staticmethod
    def _quantity(session: Session, product_id: str) -> int | None:
        return session.execute(
            sa.select(_inventory.c.quantity).where(_inventory.c.product_id == product_id)
        ).scalar_one_or_none()

    @staticmethod
    def _to_domain(row: InventoryRow) -> InventoryRecord:
        return InventoryRecord(
            product_id=row.product_id,
            quantity=row.quantity,
            location=row.location,
        )
