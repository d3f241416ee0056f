"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items.  The status
state machine lives here as a single transition table; every status
change, whether a plain update or a cancellation, is checked against it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ordercore.domain.exceptions import (
    AlreadyCancelledError,
    CannotCancelDeliveredError,
    EmptyOrderError,
    InvalidTransitionError,
    ValidationError,
)
from ordercore.domain.model.product import utcnow
from ordercore.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass
class OrderItem:
    """One line of an order.

    ``unit_price`` is the product's price captured when the order was
    placed; ``subtotal`` is stored alongside it.  Neither is ever
    re-derived from the product.
    """

    product_id: int
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    subtotal: Money
    id: int | None = None
    order_id: int | None = None

    @staticmethod
    def priced(product_id: int, quantity: int, unit_price: Money) -> OrderItem:
        qty = Quantity(quantity)
        return OrderItem(
            product_id=product_id,
            quantity=qty,
            unit_price=unit_price,
            subtotal=unit_price * qty.value,
        )


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so stores
    can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: int
    shipping_address: str
    total_amount: Money
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: int,
        shipping_address: str,
        items: list[OrderItem],
    ) -> Order:
        """Create a new PENDING order whose total is fixed from its items."""
        if not items:
            raise EmptyOrderError()
        if user_id is None:
            raise ValidationError("User ID is required")
        if not shipping_address or not shipping_address.strip():
            raise ValidationError("Shipping address is required")

        total = Money.zero(items[0].subtotal.currency)
        for item in items:
            total = total + item.subtotal

        now = utcnow()
        return Order(
            id=None,
            user_id=user_id,
            shipping_address=shipping_address.strip(),
            total_amount=total,
            items=list(items),
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus, at: datetime | None = None) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidTransitionError(self.status, target)
        self.status = target
        self.updated_at = at or utcnow()

    def cancel(self, at: datetime | None = None) -> None:
        """Transition PENDING|CONFIRMED|SHIPPED -> CANCELLED.

        Releasing the reserved stock is the caller's job and happens in
        the same unit of work, after the status flip.
        """
        if self.status == OrderStatus.CANCELLED:
            raise AlreadyCancelledError(self.id)
        if self.status == OrderStatus.DELIVERED:
            raise CannotCancelDeliveredError(self.id)
        self.transition_to(OrderStatus.CANCELLED, at)

    # --- Computed properties --------------------------------------------------

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def reserved_quantities(self) -> list[tuple[int, int]]:
        """(product_id, quantity) for every line, in line order."""
        return [(item.product_id, item.quantity.value) for item in self.items]
