"""Engine, session factory and transaction helper for the SQL store."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.exceptions import StorageError
from ordercore.infrastructure.persistence.sql.models import Base


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"timeout": 30})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise StorageError(f"Cannot create schema: {exc}") from exc


@contextmanager
def transaction(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run the block in one transaction; database errors become StorageError.

    Domain exceptions raised inside the block roll the transaction back
    and propagate unchanged.
    """
    try:
        with session_factory.begin() as session:
            yield session
    except SQLAlchemyError as exc:
        raise StorageError(f"Database error: {exc}") from exc


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
