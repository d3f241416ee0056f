"""Search criteria for orders and products.

Every field is optional; unset fields do not filter.  Set fields combine
with AND.  Stores that cannot push a filter down to their backend can
fall back on ``matches()`` and ``sort()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.order import Order, OrderStatus
from ordercore.domain.model.product import Product, ProductStatus

ORDER_SORT_FIELDS = ("order_date", "total_amount")
SORT_DIRECTIONS = ("ASC", "DESC")


@dataclass(frozen=True)
class OrderSearchCriteria:
    user_id: int | None = None
    status: OrderStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    sort_by: str = "order_date"
    sort_direction: str = "DESC"

    def __post_init__(self) -> None:
        if self.sort_by not in ORDER_SORT_FIELDS:
            raise ValidationError(
                f"Cannot sort orders by '{self.sort_by}' "
                f"(expected one of {', '.join(ORDER_SORT_FIELDS)})"
            )
        if self.sort_direction.upper() not in SORT_DIRECTIONS:
            raise ValidationError(
                f"Sort direction must be ASC or DESC, got '{self.sort_direction}'"
            )

    def matches(self, order: Order) -> bool:
        if self.user_id is not None and order.user_id != self.user_id:
            return False
        if self.status is not None and order.status != self.status:
            return False
        if self.start_date is not None and order.created_at < self.start_date:
            return False
        if self.end_date is not None and order.created_at > self.end_date:
            return False
        amount = order.total_amount.amount
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        return True

    def sort(self, orders: list[Order]) -> list[Order]:
        if self.sort_by == "total_amount":
            key = lambda o: (o.total_amount.amount, o.id)  # noqa: E731
        else:
            key = lambda o: (o.created_at, o.id)  # noqa: E731
        return sorted(orders, key=key, reverse=self.sort_direction.upper() == "DESC")


@dataclass(frozen=True)
class ProductSearchCriteria:
    name: str | None = None
    categories: list[str] = field(default_factory=list)
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    in_stock_only: bool = False
    statuses: list[ProductStatus] = field(default_factory=list)

    def matches(self, product: Product) -> bool:
        if self.name and self.name.lower() not in product.name.lower():
            return False
        if self.categories and product.category not in self.categories:
            return False
        price = product.price.amount
        if self.min_price is not None and price < self.min_price:
            return False
        if self.max_price is not None and price > self.max_price:
            return False
        if self.in_stock_only and not product.in_stock:
            return False
        if self.statuses and product.status not in self.statuses:
            return False
        return True
