"""Application service: Delete Order use case.

An administrative clean-up, not a cancellation: stock reserved by the
order is *not* given back.  Cancel first if the stock should return to
the pool.
"""

from __future__ import annotations

import logging

from ordercore.domain.exceptions import OrderNotFoundError
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class DeleteOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int) -> None:
        logger.info("Deleting order: %s", order_id)

        with self._uow_factory() as uow:
            uow.lock_order(order_id)
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            # Items go first; the order record must not outlive them.
            uow.orders.delete_items(order_id)
            uow.orders.delete(order_id)
            uow.commit()

        logger.info("Order %s deleted (status was %s)", order_id, order.status.value)
