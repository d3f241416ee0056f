"""Unit tests for the Order aggregate and its status state machine."""

import itertools

import pytest

from ordercore.domain.exceptions import (
    AlreadyCancelledError,
    CannotCancelDeliveredError,
    EmptyOrderError,
    InvalidTransitionError,
    ValidationError,
)
from ordercore.domain.model.order import ALLOWED_TRANSITIONS, Order, OrderItem, OrderStatus
from ordercore.domain.model.value_objects import Money


def _make_item(product_id: int = 1, qty: int = 1, price: str = "15.00") -> OrderItem:
    """Helper to build a priced line item."""
    return OrderItem.priced(product_id=product_id, quantity=qty, unit_price=Money.of(price))


def _order_in(status: OrderStatus) -> Order:
    order = Order.create(user_id=1, shipping_address="1 Main St", items=[_make_item()])
    order.id = 42
    order.status = status
    return order


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(1, "1 Main St", [_make_item(qty=2, price="10.00")])
        assert order.user_id == 1
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Money.of("20.00")
        assert order.id is None  # assigned by the store

    def test_total_is_sum_of_subtotals(self):
        items = [_make_item(1, qty=3, price="15.00"), _make_item(2, qty=5, price="25.00")]
        order = Order.create(7, "1 Main St", items)
        assert order.total_amount == Money.of("170.00")

    def test_no_items_rejected(self):
        with pytest.raises(EmptyOrderError, match="at least one item"):
            Order.create(1, "1 Main St", [])

    def test_blank_address_rejected(self):
        with pytest.raises(ValidationError, match="Shipping address"):
            Order.create(1, "   ", [_make_item()])

    def test_total_not_recomputed_from_items(self):
        order = Order.create(1, "1 Main St", [_make_item(qty=2, price="10.00")])
        order.items.append(_make_item(qty=1, price="99.00"))
        assert order.total_amount == Money.of("20.00")


class TestOrderItem:

    def test_subtotal_is_quantity_times_snapshot_price(self):
        item = _make_item(qty=3, price="15.00")
        assert item.subtotal == Money.of("45.00")
        assert item.unit_price == Money.of("15.00")

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _make_item(qty=0)


class TestStateMachine:

    @pytest.mark.parametrize(
        "current, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        ],
    )
    def test_forward_transitions(self, current, target):
        order = _order_in(current)
        order.transition_to(target)
        assert order.status == target

    @pytest.mark.parametrize(
        "current, target",
        [
            (current, target)
            for current, target in itertools.product(OrderStatus, OrderStatus)
            if target not in ALLOWED_TRANSITIONS[current]
        ],
    )
    def test_every_unlisted_transition_rejected(self, current, target):
        order = _order_in(current)
        with pytest.raises(InvalidTransitionError):
            order.transition_to(target)
        assert order.status == current

    def test_terminal_states(self):
        assert OrderStatus.DELIVERED.is_terminal
        assert OrderStatus.CANCELLED.is_terminal
        assert not OrderStatus.PENDING.is_terminal
        assert not OrderStatus.SHIPPED.is_terminal

    def test_transition_records_update_time(self):
        order = _order_in(OrderStatus.PENDING)
        before = order.updated_at
        order.transition_to(OrderStatus.CONFIRMED)
        assert order.updated_at >= before


class TestCancel:

    @pytest.mark.parametrize(
        "status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.SHIPPED]
    )
    def test_cancellable_states(self, status):
        order = _order_in(status)
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_already_cancelled(self):
        order = _order_in(OrderStatus.CANCELLED)
        with pytest.raises(AlreadyCancelledError):
            order.cancel()

    def test_delivered_cannot_be_cancelled(self):
        order = _order_in(OrderStatus.DELIVERED)
        with pytest.raises(CannotCancelDeliveredError):
            order.cancel()
        assert order.status == OrderStatus.DELIVERED

    def test_cancel_errors_are_distinct_from_invalid_transition(self):
        assert not issubclass(AlreadyCancelledError, InvalidTransitionError)
        assert not issubclass(CannotCancelDeliveredError, InvalidTransitionError)
