"""Test builders and failure-injecting fakes.

The in-memory database is the real store used in tests; these helpers seed
it and, where a test needs a write to fail half-way, swap in a unit of
work whose repository raises.
"""

from __future__ import annotations

from ordercore.domain.model.product import Product, ProductStatus
from ordercore.domain.model.value_objects import Money
from ordercore.infrastructure.persistence.memory import InMemoryDatabase, InMemoryUnitOfWork


def make_product(
    name: str = "Widget",
    price: str = "10.00",
    stock: int = 5,
    category: str = "Tools",
    status: ProductStatus = ProductStatus.AVAILABLE,
) -> Product:
    return Product.create(
        name=name,
        price=Money.of(price),
        stock_quantity=stock,
        category=category,
        status=status,
    )


def seed(db: InMemoryDatabase, *products: Product) -> list[int]:
    """Add *products* in one commit and return their assigned IDs."""
    with db.unit_of_work() as uow:
        for product in products:
            uow.products.add(product)
        uow.commit()
    return [p.id for p in products]


def stock_of(db: InMemoryDatabase, product_id: int) -> int:
    with db.unit_of_work() as uow:
        return uow.products.get_by_id(product_id).stock_quantity


class SimulatedWriteFailure(RuntimeError):
    pass


class FailingItemsDatabase(InMemoryDatabase):
    """A database whose units of work fail when writing order items."""

    def unit_of_work(self) -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork(self)
        uow.orders.insert_items = self._fail  # type: ignore[method-assign]
        return uow

    @staticmethod
    def _fail(order_id, items):
        raise SimulatedWriteFailure(f"could not write items for order {order_id}")
