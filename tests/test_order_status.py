"""Order status machine tests."""

import pytest

from bistro.core.errors import InvalidTransition, ValidationFailed
from bistro.models.order import Order, OrderStatus
from bistro.services import order_status


ALL_STATUSES: list[OrderStatus] = list(OrderStatus)
LEGAL_EDGES: set[tuple[OrderStatus, OrderStatus]] = {
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    (OrderStatus.PREPARING, OrderStatus.DELIVERED),
    (OrderStatus.PREPARING, OrderStatus.CANCELLED),
}


@pytest.mark.parametrize("current", ALL_STATUSES)
@pytest.mark.parametrize("target", ALL_STATUSES)
def test_transition_grid(current: OrderStatus, target: OrderStatus) -> None:
    order = Order(status=current.value)

    if (current, target) in LEGAL_EDGES:
        assert order_status.transition_to(order, target) == target
        assert order.status == target.value
        assert order.status_updated_at is not None
    else:
        with pytest.raises(InvalidTransition):
            order_status.transition_to(order, target)
        assert order.status == current.value
        assert order.status_updated_at is None


def test_confirm_sets_confirmed_at() -> None:
    order = Order(status=OrderStatus.PENDING.value)

    order_status.transition_to(order, "confirmed")

    assert order.confirmed_at is not None
    assert order.confirmed_at == order.status_updated_at


def test_terminal_statuses() -> None:
    assert order_status.TERMINAL_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def test_unknown_target_is_a_validation_error() -> None:
    order = Order(status=OrderStatus.PENDING.value)

    with pytest.raises(ValidationFailed):
        order_status.transition_to(order, "shipped")


def test_advance_cycles_and_wraps() -> None:
    order = Order(status=OrderStatus.PENDING.value)

    seen: list[OrderStatus] = [order_status.advance(order) for _ in range(5)]

    assert seen == [
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.PENDING,
    ]
    assert order.confirmed_at is not None


def test_advance_from_unknown_status_resets_to_pending() -> None:
    order = Order(status="legacy")

    assert order_status.advance(order) == OrderStatus.PENDING
    assert order.status == "pending"
