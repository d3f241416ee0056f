"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, products are added and removed from the catalog.

Stock is the one field with concurrent writers.  It is set once when the
product is first added and afterwards only moves through
``apply_stock_delta``, which product stores call from ``adjust_stock``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ordercore.domain.exceptions import InsufficientStockError, ValidationError
from ordercore.domain.model.value_objects import Money


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductStatus(Enum):
    AVAILABLE = "AVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    DISCONTINUED = "DISCONTINUED"


@dataclass
class Product:
    """A product in the catalog.

    The ``__init__`` is intentionally simple so stores can reconstitute
    persisted products without re-validating.  Use ``Product.create()``
    for new products.
    """

    id: int | None
    name: str
    price: Money
    stock_quantity: int = 0
    category: str = ""
    description: str = ""
    status: ProductStatus = ProductStatus.AVAILABLE
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        name: str,
        price: Money,
        stock_quantity: int = 0,
        category: str = "",
        description: str = "",
        status: ProductStatus = ProductStatus.AVAILABLE,
    ) -> Product:
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        if not isinstance(stock_quantity, int) or stock_quantity < 0:
            raise ValidationError("Initial stock quantity cannot be negative")
        return Product(
            id=None,
            name=name.strip(),
            price=price,
            stock_quantity=stock_quantity,
            category=category.strip(),
            description=description,
            status=status,
        )

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price
        self.updated_at = utcnow()

    def update_details(
        self,
        name: str | None = None,
        description: str | None = None,
        category: str | None = None,
        status: ProductStatus | None = None,
        price: Money | None = None,
    ) -> None:
        """Apply a partial update.  Stock is deliberately not a parameter."""
        if name is not None:
            if not name.strip():
                raise ValidationError("Product name is required")
            self.name = name.strip()
        if description is not None:
            self.description = description
        if category is not None:
            self.category = category.strip()
        if status is not None:
            self.status = status
        if price is not None:
            self.update_price(price)
        self.updated_at = utcnow()

    def apply_stock_delta(self, delta: int) -> int:
        """Move stock by *delta* and return the new quantity.

        Only product stores call this, from ``adjust_stock``.
        """
        new_quantity = self.stock_quantity + delta
        if delta < 0 and new_quantity < 0:
            raise InsufficientStockError(
                product_id=self.id,  # type: ignore[arg-type]
                product_name=self.name,
                available=self.stock_quantity,
                requested=-delta,
            )
        self.stock_quantity = new_quantity
        self.updated_at = utcnow()
        return new_quantity

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
