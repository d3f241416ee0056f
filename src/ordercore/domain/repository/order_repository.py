"""Abstract repository for Order aggregate.

Orders and their items are separate records: an order row is inserted
first, then its items as one batch keyed by the new order ID.  The
repository never cascades; callers delete items before the order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ordercore.domain.model.criteria import OrderSearchCriteria
from ordercore.domain.model.order import Order, OrderItem, OrderStatus
from ordercore.domain.model.value_objects import Money


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order with its items, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, newest first."""

    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def insert(self, order: Order) -> int:
        """Persist the order record (without items) and assign its ID."""

    @abstractmethod
    def insert_items(self, order_id: int, items: list[OrderItem]) -> list[OrderItem]:
        """Persist all items of an order as one batch, assigning item IDs."""

    @abstractmethod
    def update_status(self, order_id: int, status: OrderStatus, at: datetime) -> None:
        """Change an order's status in place and record the update time."""

    @abstractmethod
    def delete_items(self, order_id: int) -> None:
        """Remove every item belonging to an order."""

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove the order record.  Items must already be gone."""

    @abstractmethod
    def search(self, criteria: OrderSearchCriteria) -> list[Order]:
        """Return orders matching *criteria* in the requested order."""

    @abstractmethod
    def total_amount_by_user(self, user_id: int) -> Money:
        """Sum of a user's order totals, excluding cancelled orders."""

    @abstractmethod
    def count_by_date_range(self, start: datetime, end: datetime) -> int:
        """Number of orders created between *start* and *end* inclusive."""
