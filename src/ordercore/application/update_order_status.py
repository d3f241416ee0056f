"""Application service: Update Order Status use case.

Moves an order forward through PENDING -> CONFIRMED -> SHIPPED ->
DELIVERED.  Cancelling is a separate use case (``CancelOrderHandler``)
because it must also give the reserved stock back.
"""

from __future__ import annotations

import logging

from ordercore.application.dto import OrderDTO
from ordercore.domain.exceptions import (
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from ordercore.domain.model.order import OrderStatus
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


def parse_status(value: OrderStatus | str) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value.strip().upper())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Unknown order status '{value}' (expected one of {allowed})"
        ) from exc


class UpdateOrderStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int, new_status: OrderStatus | str) -> OrderDTO:
        target = parse_status(new_status)
        logger.info("Updating order %s status to: %s", order_id, target.value)

        with self._uow_factory() as uow:
            uow.lock_order(order_id)
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            # Illegal moves report as such even when the target is CANCELLED.
            if not order.status.can_transition_to(target):
                raise InvalidTransitionError(order.status, target)
            if target == OrderStatus.CANCELLED:
                raise ValidationError(
                    "Orders are cancelled through the cancel operation, "
                    "which also restores reserved stock"
                )

            previous = order.status
            order.transition_to(target)
            uow.orders.update_status(order_id, order.status, order.updated_at)
            uow.commit()

        logger.info(
            "Order %s status changed from %s to %s", order_id, previous.value, target.value
        )
        return OrderDTO.from_domain(order)
