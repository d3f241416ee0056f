"""Abstract Unit of Work: the transaction boundary.

Every multi-step operation runs inside exactly one unit of work::

    with uow_factory() as uow:
        uow.lock_products(ids)
        ...
        uow.commit()

Writes made through ``uow.products`` and ``uow.orders`` stay private to
the unit of work until ``commit()``.  Leaving the block without
committing, or through an exception, discards them.  Locks taken by the
unit of work are released on exit either way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self.release_locks()

    @abstractmethod
    def lock_products(self, product_ids: Iterable[int]) -> None:
        """Take exclusive locks on products, in ascending ID order.

        Raises BusyError if a lock is not free within the store's
        timeout.
        """

    @abstractmethod
    def lock_order(self, order_id: int) -> None:
        """Take an exclusive lock on one order."""

    @abstractmethod
    def commit(self) -> None:
        """Publish every staged change at once."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged changes.  A no-op after ``commit()``."""

    @abstractmethod
    def release_locks(self) -> None:
        """Release every lock held by this unit of work."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
