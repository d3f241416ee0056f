"""Application service: Show Order use cases (queries)."""

from __future__ import annotations

import logging

from ordercore.application.dto import OrderDTO
from ordercore.domain.exceptions import OrderNotFoundError
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int) -> OrderDTO:
        logger.debug("Fetching order by id: %s", order_id)
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return OrderDTO.from_domain(order)


class ListUserOrdersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: int | None = None) -> list[OrderDTO]:
        """Orders for one user, or every order when *user_id* is None."""
        logger.debug("Fetching orders for user: %s", user_id)
        with self._uow_factory() as uow:
            if user_id is None:
                orders = uow.orders.list_all()
            else:
                orders = uow.orders.list_by_user(user_id)
        return [OrderDTO.from_domain(o) for o in orders]
