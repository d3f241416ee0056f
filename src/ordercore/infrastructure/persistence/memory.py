"""In-memory record store with transactional units of work.

Committed data lives in an immutable ``_Snapshot`` that is swapped in one
assignment on every commit, so a reader always sees either all of a
transaction's effects or none of them.  Each ``InMemoryUnitOfWork``
stages its writes privately and publishes them through
``InMemoryDatabase.apply``.

Entities handed out by the repositories are copies; changing them has no
effect until they are passed back through a repository method and the
unit of work commits.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from ordercore.domain.exceptions import (
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from ordercore.domain.model.criteria import OrderSearchCriteria, ProductSearchCriteria
from ordercore.domain.model.order import Order, OrderItem, OrderStatus
from ordercore.domain.model.product import Product, ProductStatus
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.product_repository import ProductRepository
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.infrastructure.persistence.locks import (
    DEFAULT_LOCK_TIMEOUT,
    LockKey,
    LockManager,
)

logger = logging.getLogger(__name__)


def _copy_product(product: Product) -> Product:
    return replace(product)


def _copy_item(item: OrderItem) -> OrderItem:
    return replace(item)


def _copy_order(order: Order, items: list[OrderItem]) -> Order:
    return replace(order, items=[_copy_item(i) for i in items])


@dataclass(frozen=True)
class _Snapshot:
    """Committed state.  Never mutated; replaced wholesale on commit."""

    products: dict[int, Product] = field(default_factory=dict)
    orders: dict[int, Order] = field(default_factory=dict)  # items held separately
    items: dict[int, list[OrderItem]] = field(default_factory=dict)


@dataclass
class _Changes:
    """Writes staged by one unit of work.  ``None`` marks a deletion."""

    products: dict[int, Product | None] = field(default_factory=dict)
    orders: dict[int, Order | None] = field(default_factory=dict)
    items: dict[int, list[OrderItem] | None] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.products or self.orders or self.items)


class InMemoryDatabase:

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.locks = LockManager(lock_timeout)
        self._snapshot = _Snapshot()
        self._commit_lock = threading.Lock()
        self._sequences = {"product": 0, "order": 0, "item": 0}
        self._sequence_lock = threading.Lock()

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    @property
    def snapshot(self) -> _Snapshot:
        return self._snapshot

    def next_id(self, kind: str) -> int:
        """Hand out the next ID for *kind*.  IDs are never reused, even
        when the unit of work that drew one rolls back."""
        with self._sequence_lock:
            self._sequences[kind] += 1
            return self._sequences[kind]

    def apply(self, changes: _Changes) -> None:
        """Publish *changes* atomically."""
        with self._commit_lock:
            current = self._snapshot
            products = dict(current.products)
            orders = dict(current.orders)
            items = dict(current.items)
            _overlay(products, changes.products)
            _overlay(orders, changes.orders)
            _overlay(items, changes.items)
            snapshot = _Snapshot(products=products, orders=orders, items=items)
            self._persist(snapshot)
            self._snapshot = snapshot

    def begin(self) -> None:
        """Called when a unit of work opens.  Durable subclasses take their
        store-wide lock and pick up other processes' commits here."""

    def end(self) -> None:
        """Called when a unit of work closes, after rollback and lock release."""

    def _persist(self, snapshot: _Snapshot) -> None:
        """Hook for durable subclasses; called before a commit is published."""

    def _reset_sequences(self, snapshot: _Snapshot) -> None:
        item_ids = [i.id for items in snapshot.items.values() for i in items if i.id]
        self._sequences = {
            "product": max(snapshot.products, default=0),
            "order": max(snapshot.orders, default=0),
            "item": max(item_ids, default=0),
        }


def _overlay(target: dict, staged: dict) -> None:
    for key, value in staged.items():
        if value is None:
            target.pop(key, None)
        else:
            target[key] = value


class InMemoryUnitOfWork(UnitOfWork):

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self._changes = _Changes()
        self._held: set[LockKey] = set()
        self._held_order: list[LockKey] = []
        self.products = _ProductRepository(self)
        self.orders = _OrderRepository(self)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._db.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._db.end()

    # --- UnitOfWork interface -------------------------------------------------

    def lock_products(self, product_ids: Iterable[int]) -> None:
        self._lock(("product", pid) for pid in product_ids)

    def lock_order(self, order_id: int) -> None:
        self._lock([("order", order_id)])

    def commit(self) -> None:
        if self._changes:
            self._db.apply(self._changes)
        self._changes = _Changes()

    def rollback(self) -> None:
        if self._changes:
            logger.debug("Discarding uncommitted changes")
        self._changes = _Changes()

    def release_locks(self) -> None:
        self._db.locks.release(self._held_order)
        self._held.clear()
        self._held_order = []

    # --- Internal helpers -----------------------------------------------------

    def _lock(self, keys: Iterable[LockKey]) -> None:
        wanted = [k for k in keys if k not in self._held]
        if not wanted:
            return
        acquired = self._db.locks.acquire_all(wanted)
        self._held.update(acquired)
        self._held_order.extend(acquired)

    def _current_product(self, product_id: int) -> Product | None:
        if product_id in self._changes.products:
            return self._changes.products[product_id]
        return self._db.snapshot.products.get(product_id)

    def _current_order(self, order_id: int) -> Order | None:
        if order_id in self._changes.orders:
            return self._changes.orders[order_id]
        return self._db.snapshot.orders.get(order_id)

    def _current_items(self, order_id: int) -> list[OrderItem]:
        if order_id in self._changes.items:
            return self._changes.items[order_id] or []
        return self._db.snapshot.items.get(order_id, [])

    def _all_products(self) -> list[Product]:
        merged = dict(self._db.snapshot.products)
        _overlay(merged, self._changes.products)
        return [merged[pid] for pid in sorted(merged)]

    def _all_orders(self) -> list[Order]:
        snapshot = self._db.snapshot
        orders = dict(snapshot.orders)
        items = dict(snapshot.items)
        _overlay(orders, self._changes.orders)
        _overlay(items, self._changes.items)
        return [_copy_order(o, items.get(oid, [])) for oid, o in orders.items()]


class _ProductRepository(ProductRepository):

    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def get_by_id(self, product_id: int) -> Product | None:
        product = self._uow._current_product(product_id)
        return _copy_product(product) if product is not None else None

    def list_all(self) -> list[Product]:
        return [_copy_product(p) for p in self._uow._all_products()]

    def search(self, criteria: ProductSearchCriteria) -> list[Product]:
        return [_copy_product(p) for p in self._uow._all_products() if criteria.matches(p)]

    def find_by_category(self, category: str) -> list[Product]:
        found = [
            p for p in self._uow._all_products()
            if p.category == category and p.status == ProductStatus.AVAILABLE
        ]
        found.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return [_copy_product(p) for p in found]

    def find_low_stock(self, threshold: int) -> list[Product]:
        found = [p for p in self._uow._all_products() if p.stock_quantity < threshold]
        found.sort(key=lambda p: (p.stock_quantity, p.id))
        return [_copy_product(p) for p in found]

    def add(self, product: Product) -> Product:
        if product.stock_quantity < 0:
            raise ValidationError("Initial stock quantity cannot be negative")
        product.id = self._uow._db.next_id("product")
        self._uow.lock_products([product.id])
        self._uow._changes.products[product.id] = _copy_product(product)
        return product

    def save(self, product: Product) -> None:
        if product.id is None:
            raise ValidationError("Cannot save a product that was never added")
        self._uow.lock_products([product.id])
        current = self._uow._current_product(product.id)
        if current is None:
            raise ProductNotFoundError(product.id)
        self._uow._changes.products[product.id] = replace(
            product,
            stock_quantity=current.stock_quantity,
            created_at=current.created_at,
        )

    def delete(self, product_id: int) -> None:
        self._uow.lock_products([product_id])
        if self._uow._current_product(product_id) is None:
            raise ProductNotFoundError(product_id)
        self._uow._changes.products[product_id] = None

    def adjust_stock(self, product_id: int, delta: int) -> int:
        self._uow.lock_products([product_id])
        current = self._uow._current_product(product_id)
        if current is None:
            raise ProductNotFoundError(product_id)
        working = _copy_product(current)
        new_quantity = working.apply_stock_delta(delta)
        self._uow._changes.products[product_id] = working
        return new_quantity


class _OrderRepository(OrderRepository):

    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._uow._current_order(order_id)
        if order is None:
            return None
        return _copy_order(order, self._uow._current_items(order_id))

    def list_all(self) -> list[Order]:
        return _newest_first(self._uow._all_orders())

    def list_by_user(self, user_id: int) -> list[Order]:
        return _newest_first(o for o in self._uow._all_orders() if o.user_id == user_id)

    def insert(self, order: Order) -> int:
        order_id = self._uow._db.next_id("order")
        self._uow.lock_order(order_id)
        self._uow._changes.orders[order_id] = replace(order, id=order_id, items=[])
        self._uow._changes.items[order_id] = []
        order.id = order_id
        return order_id

    def insert_items(self, order_id: int, items: list[OrderItem]) -> list[OrderItem]:
        if self._uow._current_order(order_id) is None:
            raise OrderNotFoundError(order_id)
        saved = [
            replace(item, id=self._uow._db.next_id("item"), order_id=order_id)
            for item in items
        ]
        existing = list(self._uow._current_items(order_id))
        self._uow._changes.items[order_id] = existing + saved
        return [_copy_item(i) for i in saved]

    def update_status(self, order_id: int, status: OrderStatus, at: datetime) -> None:
        self._uow.lock_order(order_id)
        current = self._uow._current_order(order_id)
        if current is None:
            raise OrderNotFoundError(order_id)
        self._uow._changes.orders[order_id] = replace(current, status=status, updated_at=at)

    def delete_items(self, order_id: int) -> None:
        self._uow.lock_order(order_id)
        self._uow._changes.items[order_id] = None

    def delete(self, order_id: int) -> None:
        self._uow.lock_order(order_id)
        if self._uow._current_order(order_id) is None:
            raise OrderNotFoundError(order_id)
        if self._uow._current_items(order_id):
            raise ValidationError(
                f"Order #{order_id} still has items; delete them first"
            )
        self._uow._changes.orders[order_id] = None

    def search(self, criteria: OrderSearchCriteria) -> list[Order]:
        return criteria.sort([o for o in self._uow._all_orders() if criteria.matches(o)])

    def total_amount_by_user(self, user_id: int) -> Money:
        total = Money.zero()
        for order in self._uow._all_orders():
            if order.user_id == user_id and order.status != OrderStatus.CANCELLED:
                total = total + order.total_amount
        return total

    def count_by_date_range(self, start: datetime, end: datetime) -> int:
        return sum(1 for o in self._uow._all_orders() if start <= o.created_at <= end)


def _newest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)
