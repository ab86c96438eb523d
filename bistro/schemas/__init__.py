"""Schema exports."""

from bistro.schemas.order import (
    CartItemPayload,
    OrderConfirm,
    OrderCreate,
    OrderEnvelope,
    OrderItemResponse,
    OrderResponse,
    OrderStatusUpdate,
    StatusChangeResponse,
)
from bistro.schemas.reservation import (
    AvailabilityResponse,
    ReservationConfirm,
    ReservationCreate,
    ReservationCreated,
    ReservationOutcome,
    ReservationResponse,
)

__all__ = [
    "CartItemPayload",
    "OrderConfirm",
    "OrderCreate",
    "OrderEnvelope",
    "OrderItemResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "StatusChangeResponse",
    "AvailabilityResponse",
    "ReservationConfirm",
    "ReservationCreate",
    "ReservationCreated",
    "ReservationOutcome",
    "ReservationResponse",
]
