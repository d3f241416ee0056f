"""Application service: order search and spend reporting (queries)."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from ordercore.application.dto import OrderDTO
from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.criteria import OrderSearchCriteria
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class SearchOrdersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, criteria: OrderSearchCriteria) -> list[OrderDTO]:
        logger.debug("Searching orders with criteria: %s", criteria)
        with self._uow_factory() as uow:
            orders = uow.orders.search(criteria)
        return [OrderDTO.from_domain(o) for o in orders]


class TotalSpendHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, user_id: int) -> Decimal:
        """Sum of a user's order totals.  Cancelled orders do not count."""
        logger.debug("Calculating total amount for user: %s", user_id)
        with self._uow_factory() as uow:
            return uow.orders.total_amount_by_user(user_id).amount


class CountOrdersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, start: datetime, end: datetime) -> int:
        if start > end:
            raise ValidationError("Start date must not be after end date")
        with self._uow_factory() as uow:
            return uow.orders.count_by_date_range(start, end)
