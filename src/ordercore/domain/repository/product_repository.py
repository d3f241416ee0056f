"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.criteria import ProductSearchCriteria
from ordercore.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog, ordered by ID."""

    @abstractmethod
    def search(self, criteria: ProductSearchCriteria) -> list[Product]:
        """Return products matching *criteria*, ordered by ID."""

    @abstractmethod
    def find_by_category(self, category: str) -> list[Product]:
        """Return AVAILABLE products in *category*, newest first."""

    @abstractmethod
    def find_low_stock(self, threshold: int) -> list[Product]:
        """Return products with stock below *threshold*, lowest stock first."""

    @abstractmethod
    def add(self, product: Product) -> Product:
        """Insert a new product, assigning its ID."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist changes to an existing product.

        The stored stock quantity is kept as is; stock only changes
        through ``adjust_stock``.
        """

    @abstractmethod
    def delete(self, product_id: int) -> None:
        """Remove a product from the catalog."""

    @abstractmethod
    def adjust_stock(self, product_id: int, delta: int) -> int:
        """Atomically move a product's stock by *delta*.

        Returns the new quantity.  Raises ProductNotFoundError if the
        product does not exist and InsufficientStockError if the result
        would drop below zero.
        """
