"""Application service: Cancel Order use case.

Flips the order to CANCELLED and then releases every reserved quantity,
both inside one unit of work.  The status flip is what makes the order
cancelled: if a product has been deleted since the order was placed, its
stock cannot be restored, and that is reported back rather than failing
the cancellation.
"""

from __future__ import annotations

import logging

from ordercore.application.dto import CancellationResult, OrderDTO
from ordercore.domain.exceptions import OrderNotFoundError
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory
from ordercore.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int) -> CancellationResult:
        logger.info("Cancelling order: %s", order_id)

        with self._uow_factory() as uow:
            uow.lock_order(order_id)
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            order.cancel()
            uow.orders.update_status(order_id, order.status, order.updated_at)

            skipped = InventoryLedger(uow).release(order.reserved_quantities)
            uow.commit()

        if skipped:
            logger.warning(
                "Order %s cancelled; stock not restored for deleted product(s) %s",
                order_id,
                ", ".join(str(pid) for pid in skipped),
            )
        else:
            logger.info("Order %s cancelled and stock restored", order_id)

        return CancellationResult(
            order=OrderDTO.from_domain(order),
            unrestored_product_ids=skipped,
        )
