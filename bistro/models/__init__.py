"""Application models package."""

from bistro.models.idempotency import IdempotencyKey
from bistro.models.order import DeliveryMode, Order, OrderItem, OrderStatus, PaymentMode
from bistro.models.reservation import Reservation, ReservationStatus, Table

__all__ = [
    "IdempotencyKey", "Order", "OrderItem", "OrderStatus", "DeliveryMode", "PaymentMode",
    "Reservation", "ReservationStatus", "Table",
]
