"""Client and staff notifications emitted after a transaction commits.

Delivery (e-mail, SMS) lives outside this service; the default notifier only
logs. Notification failures are logged and swallowed so they can never undo
or block the change that triggered them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from bistro.models.order import Order
from bistro.models.reservation import Reservation

logger = logging.getLogger(__name__)

ORDER_CREATED: str = "order_created"
ORDER_CONFIRMED: str = "order_confirmed"
RESERVATION_CONFIRMED: str = "reservation_confirmed"
RESERVATION_CANCELLED: str = "reservation_cancelled"


@dataclass(frozen=True)
class Notification:
    kind: str
    recipient: str | None
    subject: str
    context: dict[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    def send(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Default notifier that records notifications in the application log."""

    def send(self, notification: Notification) -> None:
        logger.info(
            "[NOTIFY] %s to=%s subject=%s",
            notification.kind,
            notification.recipient or "staff",
            notification.subject,
        )


notifier: Notifier = LoggingNotifier()


def deliver(notification: Notification) -> bool:
    """Send through the configured notifier; return False instead of raising."""
    try:
        notifier.send(notification)
    except Exception:
        logger.exception("[NOTIFY] Failed to send %s to %s", notification.kind, notification.recipient or "staff")
        return False
    return True


def order_created(order: Order) -> Notification:
    return Notification(
        kind=ORDER_CREATED,
        recipient=None,
        subject=f"New order {order.no}",
        context={"order_id": order.id, "no": order.no, "total": str(order.total)},
    )


def order_confirmed(order: Order, message: str) -> Notification:
    return Notification(
        kind=ORDER_CONFIRMED,
        recipient=order.client_email,
        subject=f"Your order {order.no} is confirmed",
        context={"order_id": order.id, "client_name": order.client_name, "message": message},
    )


def reservation_confirmed(reservation: Reservation) -> Notification:
    return Notification(
        kind=RESERVATION_CONFIRMED,
        recipient=reservation.email,
        subject="Your reservation is confirmed",
        context={
            "reservation_id": reservation.id,
            "client_name": reservation.client_name,
            "date": reservation.date.isoformat(),
            "time": reservation.time,
            "guests": reservation.guests,
            "message": reservation.confirmation_message,
        },
    )


def reservation_cancelled(reservation: Reservation) -> Notification:
    return Notification(
        kind=RESERVATION_CANCELLED,
        recipient=reservation.email,
        subject="Your reservation has been cancelled",
        context={
            "reservation_id": reservation.id,
            "client_name": reservation.client_name,
            "date": reservation.date.isoformat(),
            "time": reservation.time,
        },
    )
