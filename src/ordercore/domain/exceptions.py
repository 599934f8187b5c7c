"""Domain-level exceptions.

Every business rule violation is a subclass of DomainException and carries
an ``ErrorKind`` so callers can match on the kind of failure as well as on
the class.  Infrastructure failures are reported as StorageError, which is
not a DomainException; callers may treat it differently (e.g. resubmit
later).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNAVAILABLE = "UNAVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFLICT = "CONFLICT"
    STORAGE = "STORAGE"


class DomainException(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT


class ValidationError(DomainException):
    """A business rule or invariant was violated by the caller's input."""

    kind = ErrorKind.INVALID_ARGUMENT


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class DuplicateEntityError(DomainException):
    """An entity with the same key already exists."""

    kind = ErrorKind.CONFLICT


class ProductUnavailableError(DomainException):
    """The product exists but is flagged as not orderable."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(self, product_id: str, product_name: str | None = None) -> None:
        self.product_id = product_id
        label = product_name or product_id
        super().__init__(f"Product '{label}' is not available")


class InsufficientStockError(DomainException):
    """Raised by the inventory ledger when a reservation would overdraw."""

    kind = ErrorKind.OUT_OF_STOCK

    def __init__(self, product_id: str, requested: int, available: int | None) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(need {requested}, have {available if available is not None else 'none'})"
        )


class OutOfStockError(DomainException):
    """An order line could not be reserved against the inventory ledger."""

    kind = ErrorKind.OUT_OF_STOCK

    def __init__(
        self,
        product_id: str,
        requested: int,
        available: int | None = None,
        product_name: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        label = product_name or product_id
        super().__init__(f"Product '{label}' is out of stock (requested {requested})")


class InvalidTransitionError(DomainException):
    """A status change violates the order lifecycle."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, current, requested, reason: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move order from {current.value} to {requested.value}: {reason}"
        )


class StorageError(Exception):
    """The backing store failed (I/O error, connection loss, corrupt data)."""

    kind = ErrorKind.STORAGE
