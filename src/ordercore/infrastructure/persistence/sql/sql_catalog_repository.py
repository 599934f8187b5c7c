"""SQL-backed product catalog and user directory."""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.model.product import Product
from ordercore.domain.model.user import User
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.catalog import ProductCatalog, UserDirectory
from ordercore.infrastructure.persistence.sql.database import transaction
from ordercore.infrastructure.persistence.sql.models import ProductRow, UserRow


class SqlProductRepository(ProductCatalog):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_product(self, product_id: str) -> Product | None:
        with transaction(self._session_factory) as session:
            row = session.get(ProductRow, product_id)
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with transaction(self._session_factory) as session:
            rows = session.scalars(sa.select(ProductRow).order_by(ProductRow.id))
            return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        with transaction(self._session_factory) as session:
            session.merge(
                ProductRow(
                    id=product.id,
                    name=product.name,
                    price=product.price.amount,
                    currency=product.price.currency,
                    available=product.available,
                )
            )

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(row.price, row.currency),
            available=row.available,
        )


class SqlUserRepository(UserDirectory):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_user(self, user_id: str) -> User | None:
        with transaction(self._session_factory) as session:
            row = session.get(UserRow, user_id)
            return User(id=row.id, name=row.name) if row is not None else None

    def list_all(self) -> list[User]:
        with transaction(self._session_factory) as session:
            rows = session.scalars(sa.select(UserRow).order_by(UserRow.id))
            return [User(id=row.id, name=row.name) for row in rows]

    def save(self, user: User) -> None:
        with transaction(self._session_factory) as session:
            session.merge(UserRow(id=user.id, name=user.name))
