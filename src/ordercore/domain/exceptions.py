"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Callers that need to react differently (e.g. retry on contention, or tell a
terminal-state cancellation apart from a generic bad transition) match on
the specific subclass.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    retryable = False


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(EntityNotFoundError):

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product not found with id: {product_id}")
        self.product_id = product_id


class OrderNotFoundError(EntityNotFoundError):

    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order not found with id: {order_id}")
        self.order_id = order_id


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds what the product has on hand."""

    def __init__(
        self,
        product_id: int,
        product_name: str,
        available: int,
        requested: int,
    ) -> None:
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class EmptyOrderError(ValidationError):

    def __init__(self) -> None:
        super().__init__("Order must have at least one item")


class InvalidTransitionError(ValidationError):

    def __init__(self, current, target) -> None:
        super().__init__(
            f"Cannot change order status from {current.value} to {target.value}"
        )
        self.current = current
        self.target = target


class AlreadyCancelledError(ValidationError):

    def __init__(self, order_id: int | None) -> None:
        super().__init__(f"Order #{order_id} is already cancelled")
        self.order_id = order_id


class CannotCancelDeliveredError(ValidationError):

    def __init__(self, order_id: int | None) -> None:
        super().__init__(f"Cannot cancel delivered order #{order_id}")
        self.order_id = order_id


class BusyError(DomainException):
    """A lock on a product or order could not be acquired in time.

    This is the only retryable failure: nothing was changed, and the same
    call may succeed once the competing operation finishes.
    """

    retryable = True
