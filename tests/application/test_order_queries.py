"""Integration tests for order lookups, search and reporting."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ordercore.application.cancel_order import CancelOrderHandler
from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dto import OrderItemSpec
from ordercore.application.search_orders import (
    CountOrdersHandler,
    SearchOrdersHandler,
    TotalSpendHandler,
)
from ordercore.application.show_order import ListUserOrdersHandler, ShowOrderHandler
from ordercore.domain.exceptions import OrderNotFoundError, ValidationError
from ordercore.domain.model.criteria import OrderSearchCriteria
from ordercore.domain.model.order import OrderStatus
from tests.fakes import make_product, seed


@pytest.fixture
def orders(db):
    """Three orders: user 1 spends 10.00 and 30.00, user 2 spends 20.00."""
    (p1,) = seed(db, make_product(price="10.00", stock=100))
    create = CreateOrderHandler(db.unit_of_work).handle
    first = create(1, "1 Main St", [OrderItemSpec(p1, 1)])
    second = create(2, "2 Main St", [OrderItemSpec(p1, 2)])
    third = create(1, "1 Main St", [OrderItemSpec(p1, 3)])
    return first.id, second.id, third.id


class TestShowOrder:

    def test_repeated_reads_are_identical(self, db, orders):
        handler = ShowOrderHandler(db.unit_of_work)
        assert handler.handle(orders[0]) == handler.handle(orders[0])

    def test_unknown(self, db):
        with pytest.raises(OrderNotFoundError):
            ShowOrderHandler(db.unit_of_work).handle(1)


class TestListOrders:

    def test_by_user_newest_first(self, db, orders):
        first, _, third = orders
        listed = ListUserOrdersHandler(db.unit_of_work).handle(1)
        assert [o.id for o in listed] == [third, first]

    def test_all_orders(self, db, orders):
        assert len(ListUserOrdersHandler(db.unit_of_work).handle()) == 3

    def test_user_without_orders(self, db, orders):
        assert ListUserOrdersHandler(db.unit_of_work).handle(99) == []


class TestSearchOrders:

    def test_filters_combine(self, db, orders):
        first, _, third = orders
        criteria = OrderSearchCriteria(user_id=1, min_amount=Decimal("20.00"))
        found = SearchOrdersHandler(db.unit_of_work).handle(criteria)
        assert [o.id for o in found] == [third]

    def test_sort_by_total_ascending(self, db, orders):
        first, second, third = orders
        criteria = OrderSearchCriteria(sort_by="total_amount", sort_direction="ASC")
        found = SearchOrdersHandler(db.unit_of_work).handle(criteria)
        assert [o.id for o in found] == [first, second, third]

    def test_status_filter(self, db, orders):
        CancelOrderHandler(db.unit_of_work).handle(orders[1])
        criteria = OrderSearchCriteria(status=OrderStatus.CANCELLED)
        found = SearchOrdersHandler(db.unit_of_work).handle(criteria)
        assert [o.id for o in found] == [orders[1]]

    def test_bad_sort_field(self):
        with pytest.raises(ValidationError, match="Cannot sort orders"):
            OrderSearchCriteria(sort_by="user_id")


class TestReporting:

    def test_total_spend_excludes_cancelled(self, db, orders):
        handler = TotalSpendHandler(db.unit_of_work)
        assert handler.handle(1) == Decimal("40.00")

        CancelOrderHandler(db.unit_of_work).handle(orders[2])
        assert handler.handle(1) == Decimal("10.00")

    def test_total_spend_for_unknown_user_is_zero(self, db):
        assert TotalSpendHandler(db.unit_of_work).handle(42) == Decimal("0")

    def test_count_by_date_range(self, db, orders):
        now = datetime.now(timezone.utc)
        handler = CountOrdersHandler(db.unit_of_work)
        assert handler.handle(now - timedelta(hours=1), now + timedelta(hours=1)) == 3
        assert handler.handle(now + timedelta(hours=1), now + timedelta(hours=2)) == 0

    def test_count_rejects_inverted_range(self, db):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError):
            CountOrdersHandler(db.unit_of_work).handle(now, now - timedelta(days=1))
