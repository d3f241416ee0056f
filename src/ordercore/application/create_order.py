"""Application service: Create Order use case.

Reserving stock and writing the order happen in one unit of work: either
the stock is decremented *and* the order and all of its items are stored,
or none of it is.
"""

from __future__ import annotations

import logging

from ordercore.application.dto import OrderDTO, OrderItemSpec
from ordercore.domain.exceptions import EmptyOrderError
from ordercore.domain.model.order import Order
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory
from ordercore.domain.service.inventory_ledger import InventoryLedger, StockRequest

logger = logging.getLogger(__name__)


class CreateOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        user_id: int,
        shipping_address: str,
        item_specs: list[OrderItemSpec],
    ) -> OrderDTO:
        """Create a new PENDING order.

        Steps:
        1. Reject an empty item list before touching inventory.
        2. Reserve stock for every item (prices are snapshotted here).
        3. Build the Order from the priced items.
        4. Insert the order, then its items as one batch, and commit.
        """
        if not item_specs:
            raise EmptyOrderError()

        logger.info("Creating new order for user: %s", user_id)
        requests = [StockRequest(spec.product_id, spec.quantity) for spec in item_specs]

        with self._uow_factory() as uow:
            reservation = InventoryLedger(uow).reserve(requests)
            order = Order.create(
                user_id=user_id,
                shipping_address=shipping_address,
                items=reservation.items,
            )
            order_id = uow.orders.insert(order)
            order.items = uow.orders.insert_items(order_id, order.items)
            uow.commit()

        logger.info(
            "Order %s created for user %s: %d item(s), total %s",
            order.id,
            user_id,
            order.item_count,
            order.total_amount,
        )
        return OrderDTO.from_domain(order)
