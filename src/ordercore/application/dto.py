"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the outer layers (CLI, or an HTTP layer) and the
application handlers without exposing domain internals.  Money stays a
``Decimal`` here; formatting is left to whoever displays it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ordercore.domain.model.order import Order
from ordercore.domain.model.product import Product


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product ID + quantity)."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderItemDTO:
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal  # snapshot taken when the order was placed
    subtotal: Decimal


@dataclass(frozen=True)
class OrderDTO:
    id: int
    user_id: int
    status: str
    total_amount: Decimal
    shipping_address: str
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemDTO] = field(default_factory=list)

    @staticmethod
    def from_domain(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            user_id=order.user_id,
            status=order.status.value,
            total_amount=order.total_amount.amount,
            shipping_address=order.shipping_address,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemDTO(
                    id=item.id,  # type: ignore[arg-type]
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                    subtotal=item.subtotal.amount,
                )
                for item in order.items
            ],
        )


@dataclass(frozen=True)
class ProductDTO:
    id: int
    name: str
    description: str
    price: Decimal
    stock_quantity: int
    category: str
    status: str

    @staticmethod
    def from_domain(product: Product) -> ProductDTO:
        return ProductDTO(
            id=product.id,  # type: ignore[arg-type]
            name=product.name,
            description=product.description,
            price=product.price.amount,
            stock_quantity=product.stock_quantity,
            category=product.category,
            status=product.status.value,
        )


@dataclass(frozen=True)
class CancellationResult:
    """Output of a cancellation.

    ``unrestored_product_ids`` lists products that were deleted after the
    order was placed, so their reserved stock had nowhere to go back to.
    """

    order: OrderDTO
    unrestored_product_ids: list[int] = field(default_factory=list)
