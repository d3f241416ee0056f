"""Domain service: Inventory Ledger.

Coordinates the cross-aggregate work of reserving and releasing stock for
an order.  Every stock change in the system goes through ``adjust_stock``
here, which in turn calls the product store's atomic ``adjust_stock``.

The ledger works inside a unit of work owned by the caller: it takes the
product locks, but committing (or rolling back) is the caller's decision.
A failed ``reserve`` therefore leaves nothing behind once the caller's
unit of work is discarded.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from ordercore.domain.exceptions import (
    EmptyOrderError,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from ordercore.domain.model.order import OrderItem
from ordercore.domain.model.product import Product
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockRequest:
    """Input: how many units of a product an order wants."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class Reservation:
    """Output of a successful reserve: priced items and their total."""

    items: list[OrderItem]
    total: Money


class InventoryLedger:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def reserve(self, requests: list[StockRequest]) -> Reservation:
        """Reserve stock for every request, all or nothing.

        Phase 1 locks every distinct product in ID order and checks that
        each has enough stock for the combined quantity requested of it.
        Phase 2 snapshots the current price of each line and moves stock
        through ``adjust_stock``.
        """
        if not requests:
            raise EmptyOrderError()
        for req in requests:
            Quantity(req.quantity)

        wanted = Counter()
        for req in requests:
            wanted[req.product_id] += req.quantity

        self._uow.lock_products(wanted)

        # Phase 1: load every product and validate
        products: dict[int, Product] = {}
        for product_id in sorted(wanted):
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if product.stock_quantity < wanted[product_id]:
                raise InsufficientStockError(
                    product_id=product_id,
                    product_name=product.name,
                    available=product.stock_quantity,
                    requested=wanted[product_id],
                )
            products[product_id] = product

        # Phase 2: price each line from the snapshot, then decrement
        items = [
            OrderItem.priced(
                product_id=req.product_id,
                quantity=req.quantity,
                unit_price=products[req.product_id].price,
            )
            for req in requests
        ]
        total = Money.zero(items[0].subtotal.currency)
        for item in items:
            total = total + item.subtotal

        for product_id in sorted(wanted):
            self.adjust_stock(product_id, -wanted[product_id])

        return Reservation(items=items, total=total)

    def release(self, lines: list[tuple[int, int]]) -> list[int]:
        """Give back previously reserved stock.

        Returns the IDs of products that no longer exist and so could not
        be restocked.  Those are logged, not raised: a release is always
        part of a cancellation that must go through regardless.
        """
        restored = Counter()
        for product_id, quantity in lines:
            restored[product_id] += quantity

        self._uow.lock_products(restored)

        skipped: list[int] = []
        for product_id in sorted(restored):
            if self._uow.products.get_by_id(product_id) is None:
                logger.warning(
                    "Cannot restore %d unit(s) of product %s: product no longer exists",
                    restored[product_id],
                    product_id,
                )
                skipped.append(product_id)
                continue
            self.adjust_stock(product_id, restored[product_id])
        return skipped

    def adjust_stock(self, product_id: int, delta: int) -> int:
        """Apply a relative stock change and return the new quantity.

        Negative deltas fail with InsufficientStockError rather than take
        stock below zero.  Positive deltas have no upper bound.  A zero delta
        changes nothing and returns the current quantity.
        """
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError(f"Stock delta must be an integer, got {delta!r}")
        if delta == 0:
            product = self._uow.products.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            return product.stock_quantity

        new_quantity = self._uow.products.adjust_stock(product_id, delta)
        logger.info(
            "Stock for product %s adjusted by %+d (now %d)",
            product_id,
            delta,
            new_quantity,
        )
        return new_quantity
