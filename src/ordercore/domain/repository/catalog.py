"""Read-only collaborators the ordering core consults.

Products and users are owned elsewhere.  Defined in the domain layer so
the domain never depends on infrastructure; concrete implementations
(JSON, SQL, in-memory) live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.product import Product
from ordercore.domain.model.user import User


class ProductCatalog(ABC):

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""


class UserDirectory(ABC):

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """Return a user by its ID, or None if not found."""
