"""Reservation creation and status workflow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.core.errors import InvalidTransition, NotFound, SlotUnavailable, ValidationFailed
from bistro.models.reservation import Reservation, ReservationStatus
from bistro.schemas.reservation import ReservationCreate
from bistro.services import availability, notifications, reservation_status
from bistro.utils.time import format_slot, is_aligned_slot, parse_slot, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_MESSAGE: str = "Your reservation is confirmed."


@dataclass
class ReservationResult:
    reservation: Reservation
    notified: bool

    @property
    def outcome(self) -> str:
        if not self.notified:
            return "warning"
        return str(self.reservation.status)


def normalize_slot(value: str) -> str:
    """Validate a requested time against the half-hour service slots."""
    try:
        slot = parse_slot(value)
    except ValueError as exc:
        raise ValidationFailed.for_field("time", "Time must use the HH:MM format.") from exc
    if not is_aligned_slot(slot):
        raise ValidationFailed.for_field("time", "Time must be on a half-hour slot.")
    if not settings.reservation_first_slot <= slot <= settings.reservation_last_slot:
        raise ValidationFailed.for_field(
            "time",
            f"Reservations are taken between {format_slot(settings.reservation_first_slot)}"
            f" and {format_slot(settings.reservation_last_slot)}.",
        )
    return format_slot(slot)


def create_reservation(db: Session, payload: ReservationCreate) -> Reservation:
    """Store a reservation request as pending.

    Capacity is not enforced here; staff decide when confirming.
    """
    slot: str = normalize_slot(payload.time)
    reservation = Reservation(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=str(payload.email),
        phone=payload.phone,
        date=payload.date,
        time=slot,
        guests=payload.guests,
        message=payload.message,
        status=ReservationStatus.PENDING.value,
        is_confirmed=False,
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    logger.info(
        "[RESERVATION] Request #%s for %s %s guests=%s",
        reservation.id,
        reservation.date.isoformat(),
        reservation.time,
        reservation.guests,
    )
    return reservation


def get_reservation(db: Session, reservation_id: int, *, lock: bool = False) -> Reservation:
    """Load a reservation; ``lock`` re-reads the row with FOR UPDATE over any cached copy."""
    query = select(Reservation).where(Reservation.id == reservation_id)
    if lock:
        query = query.with_for_update().execution_options(populate_existing=True)
    reservation: Reservation | None = db.scalar(query)
    if reservation is None:
        raise NotFound("Reservation not found.")
    return reservation


def check_slot(db: Session, day: date, time_value: str, guests: int) -> availability.AvailabilityReport:
    """Informational availability lookup for the public booking form."""
    if guests < 1:
        raise ValidationFailed.for_field("guests", "At least one guest is required.")
    return availability.check_availability(db, day, normalize_slot(time_value), guests)


def _ensure_capacity(db: Session, reservation: Reservation) -> None:
    report = availability.check_availability(
        db,
        reservation.date,
        reservation.time,
        reservation.guests,
        exclude_id=reservation.id,
        lock=True,
    )
    if not report.available:
        logger.info(
            "[RESERVATION] #%s rejected: %s guests, %s of %s seats booked",
            reservation.id,
            reservation.guests,
            report.booked,
            report.capacity,
        )
        raise SlotUnavailable(
            f"Not enough seats for {reservation.guests} guests on {reservation.date.isoformat()} at "
            f"{reservation.time} ({report.remaining} left)."
        )


def confirm_reservation(db: Session, reservation_id: int, confirmation_message: str | None = None) -> ReservationResult:
    """Confirm after a final capacity check; the status is untouched when the slot is full."""
    day: date = get_reservation(db, reservation_id).date
    message: str = (confirmation_message or "").strip() or DEFAULT_CONFIRMATION_MESSAGE

    with availability.slot_lock(day):
        try:
            reservation: Reservation = get_reservation(db, reservation_id, lock=True)
            if not reservation_status.can_transition(reservation.status, ReservationStatus.CONFIRMED.value):
                raise InvalidTransition(reservation.status, ReservationStatus.CONFIRMED.value)
            _ensure_capacity(db, reservation)
            reservation_status.mark_confirmed(reservation, message, utc_now())
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(reservation)
    logger.info("[RESERVATION] #%s confirmed", reservation.id)

    notified: bool = notifications.deliver(notifications.reservation_confirmed(reservation))
    if not notified:
        logger.warning("[RESERVATION] #%s confirmed but client notification failed", reservation.id)
    return ReservationResult(reservation=reservation, notified=notified)


def cancel_reservation(db: Session, reservation_id: int) -> ReservationResult:
    day: date = get_reservation(db, reservation_id).date

    with availability.slot_lock(day):
        try:
            reservation: Reservation = get_reservation(db, reservation_id, lock=True)
            reservation_status.mark_cancelled(reservation)
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(reservation)
    logger.info("[RESERVATION] #%s cancelled", reservation.id)

    notified: bool = notifications.deliver(notifications.reservation_cancelled(reservation))
    if not notified:
        logger.warning("[RESERVATION] #%s cancelled but client notification failed", reservation.id)
    return ReservationResult(reservation=reservation, notified=notified)


def cycle_reservation_status(db: Session, reservation_id: int) -> Reservation:
    """Manual click-to-cycle; moving into confirmed still goes through the capacity gate."""
    day: date = get_reservation(db, reservation_id).date

    with availability.slot_lock(day):
        try:
            reservation: Reservation = get_reservation(db, reservation_id, lock=True)
            previous: str = reservation.status
            if reservation_status.next_in_cycle(previous) == ReservationStatus.CONFIRMED:
                _ensure_capacity(db, reservation)
            new_status: ReservationStatus = reservation_status.advance(reservation)
            if new_status == ReservationStatus.CONFIRMED and not reservation.confirmation_message:
                reservation.confirmation_message = DEFAULT_CONFIRMATION_MESSAGE
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(reservation)
    logger.info("[RESERVATION] #%s status cycled %s -> %s", reservation.id, previous, reservation.status)
    return reservation
