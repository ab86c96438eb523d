"""Reservation status transition helpers."""

from __future__ import annotations

from datetime import datetime

from bistro.core.errors import InvalidTransition, ValidationFailed
from bistro.models.reservation import Reservation, ReservationStatus
from bistro.utils.time import utc_now

# Cancelled is intentionally outside the click cycle.
RESERVATION_STATUS_CYCLE: list[ReservationStatus] = [
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.COMPLETED,
    ReservationStatus.NO_SHOW,
]

ALLOWED_TRANSITIONS: dict[ReservationStatus, set[ReservationStatus]] = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW},
    ReservationStatus.CONFIRMED: {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW},
    ReservationStatus.COMPLETED: set(),
    ReservationStatus.CANCELLED: set(),
    ReservationStatus.NO_SHOW: set(),
}


def parse_status(value: str) -> ReservationStatus:
    try:
        return ReservationStatus(value.strip().lower())
    except ValueError as exc:
        raise ValidationFailed.for_field("status", f"Unknown reservation status '{value}'.") from exc


def can_transition(current: str, new: str) -> bool:
    try:
        current_status = ReservationStatus(current)
        new_status = ReservationStatus(new)
    except ValueError:
        return False
    return new_status in ALLOWED_TRANSITIONS[current_status]


def set_status(reservation: Reservation, new_status: ReservationStatus) -> None:
    """Set status and keep the denormalized ``is_confirmed`` flag in sync."""
    reservation.status = new_status.value
    reservation.is_confirmed = new_status == ReservationStatus.CONFIRMED


def transition_to(reservation: Reservation, target: ReservationStatus | str) -> ReservationStatus:
    target_status: ReservationStatus = target if isinstance(target, ReservationStatus) else parse_status(target)
    if not can_transition(reservation.status, target_status.value):
        raise InvalidTransition(reservation.status, target_status.value)
    set_status(reservation, target_status)
    return target_status


def mark_confirmed(reservation: Reservation, message: str, now: datetime | None = None) -> None:
    transition_to(reservation, ReservationStatus.CONFIRMED)
    reservation.confirmed_at = now or utc_now()
    reservation.confirmation_message = message


def mark_cancelled(reservation: Reservation) -> None:
    transition_to(reservation, ReservationStatus.CANCELLED)


def next_in_cycle(current: str) -> ReservationStatus:
    try:
        index: int = RESERVATION_STATUS_CYCLE.index(ReservationStatus(current))
    except ValueError:
        return ReservationStatus.PENDING
    return RESERVATION_STATUS_CYCLE[(index + 1) % len(RESERVATION_STATUS_CYCLE)]


def advance(reservation: Reservation, now: datetime | None = None) -> ReservationStatus:
    """Click-to-cycle used by staff; does not consult the edges table.

    Entering ``confirmed`` stamps a fresh ``confirmed_at``; wrapping back to
    ``pending`` clears the previous confirmation.
    """
    next_status: ReservationStatus = next_in_cycle(reservation.status)
    set_status(reservation, next_status)
    if next_status == ReservationStatus.CONFIRMED:
        reservation.confirmed_at = now or utc_now()
    elif next_status == ReservationStatus.PENDING:
        reservation.confirmed_at = None
        reservation.confirmation_message = None
    return next_status
