"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from bistro.core.errors import InvalidTransition, ValidationFailed
from bistro.models.order import Order, OrderStatus
from bistro.utils.time import utc_now

ORDER_STATUS_CYCLE: list[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
]

ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        raise ValidationFailed.for_field("status", f"Unknown order status '{value}'.") from exc


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    try:
        current_status = OrderStatus(current)
        new_status = OrderStatus(new)
    except ValueError:
        return False
    return new_status in ALLOWED_TRANSITIONS[current_status]


def set_status(order: Order, new_status: OrderStatus, now: datetime) -> None:
    """Set status and update corresponding timestamps."""
    order.status = new_status.value
    order.status_updated_at = now
    if new_status == OrderStatus.CONFIRMED:
        order.confirmed_at = now


def transition_to(order: Order, target: OrderStatus | str, now: datetime | None = None) -> OrderStatus:
    """Move order to ``target`` if the edge is allowed, else raise InvalidTransition."""
    target_status: OrderStatus = target if isinstance(target, OrderStatus) else parse_status(target)
    if not can_transition(order.status, target_status.value):
        raise InvalidTransition(order.status, target_status.value)
    set_status(order, target_status, now or utc_now())
    return target_status


def next_in_cycle(current: str) -> OrderStatus:
    try:
        index: int = ORDER_STATUS_CYCLE.index(OrderStatus(current))
    except ValueError:
        return OrderStatus.PENDING
    return ORDER_STATUS_CYCLE[(index + 1) % len(ORDER_STATUS_CYCLE)]


def advance(order: Order, now: datetime | None = None) -> OrderStatus:
    """Click-to-cycle used by staff; wraps around and ignores the edges table."""
    next_status: OrderStatus = next_in_cycle(order.status)
    set_status(order, next_status, now or utc_now())
    return next_status
