"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Settings come from the environment:

- ``ORDERCORE_STORAGE``: ``json`` (default) or ``sql``
- ``ORDERCORE_DATA_DIR``: directory for the JSON files / default SQLite file
- ``ORDERCORE_DATABASE_URL``: SQLAlchemy URL for the ``sql`` backend
- ``ORDERCORE_LOG_LEVEL``: log level, ``WARNING`` by default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.exceptions import ValidationError
from ordercore.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from ordercore.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from ordercore.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from ordercore.infrastructure.persistence.json_user_repository import JsonUserRepository
from ordercore.infrastructure.persistence.sql.database import (
    create_schema,
    make_engine,
    make_session_factory,
)
from ordercore.infrastructure.persistence.sql.sql_catalog_repository import (
    SqlProductRepository,
    SqlUserRepository,
)
from ordercore.infrastructure.persistence.sql.sql_inventory_repository import (
    SqlInventoryRepository,
)
from ordercore.infrastructure.persistence.sql.sql_order_repository import (
    SqlOrderRepository,
)

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

STORAGE_BACKENDS = ("json", "sql")


@dataclass(frozen=True)
class Settings:
    storage: str
    data_dir: Path
    database_url: str
    log_level: str


def load_settings() -> Settings:
    storage = os.getenv("ORDERCORE_STORAGE", "json").strip().lower()
    if storage not in STORAGE_BACKENDS:
        raise ValidationError(
            f"ORDERCORE_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, got {storage!r}"
        )
    data_dir = Path(os.getenv("ORDERCORE_DATA_DIR", str(_DEFAULT_DATA_DIR)))
    database_url = os.getenv(
        "ORDERCORE_DATABASE_URL", f"sqlite:///{data_dir / 'ordercore.db'}"
    )
    return Settings(
        storage=storage,
        data_dir=data_dir,
        database_url=database_url,
        log_level=os.getenv("ORDERCORE_LOG_LEVEL", "WARNING"),
    )


@lru_cache(maxsize=None)
def _session_factory(database_url: str) -> sessionmaker[Session]:
    if database_url.startswith("sqlite:///"):
        Path(database_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)
    engine = make_engine(database_url)
    create_schema(engine)
    return make_session_factory(engine)


def product_repository(settings: Settings) -> JsonProductRepository | SqlProductRepository:
    if settings.storage == "sql":
        return SqlProductRepository(_session_factory(settings.database_url))
    return JsonProductRepository(settings.data_dir / "products.json")


def user_repository(settings: Settings) -> JsonUserRepository | SqlUserRepository:
    if settings.storage == "sql":
        return SqlUserRepository(_session_factory(settings.database_url))
    return JsonUserRepository(settings.data_dir / "users.json")


def inventory_repository(settings: Settings) -> JsonInventoryRepository | SqlInventoryRepository:
    if settings.storage == "sql":
        return SqlInventoryRepository(_session_factory(settings.database_url))
    return JsonInventoryRepository(settings.data_dir / "inventory.json")


def order_repository(settings: Settings) -> JsonOrderRepository | SqlOrderRepository:
    if settings.storage == "sql":
        return SqlOrderRepository(_session_factory(settings.database_url))
    return JsonOrderRepository(settings.data_dir / "orders.json")
