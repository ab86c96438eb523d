"""Capacity-aggregate availability checks for reservation slots.

Availability compares the guests of confirmed reservations around a slot with
the summed capacity of every table. Pending requests are left to staff review
and hold no seats. Tables are never assigned, so a slot that fits in aggregate
may still not be physically seatable; per-table placement is not modelled here.

Each confirmed reservation blocks ``[start, start + duration)``. With the
default 30 minute duration that reduces to exact slot matching.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.models.reservation import Reservation, ReservationStatus, Table
from bistro.utils.time import slot_start

logger = logging.getLogger(__name__)

BLOCKING_STATUSES: frozenset[str] = frozenset({ReservationStatus.CONFIRMED.value})


@dataclass(frozen=True)
class AvailabilityReport:
    date: date
    time: str
    guests: int
    capacity: int
    booked: int

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)

    @property
    def available(self) -> bool:
        return self.booked + self.guests <= self.capacity


def total_capacity(db: Session) -> int:
    return int(db.scalar(select(func.coalesce(func.sum(Table.capacity), 0))) or 0)


def _ranges_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


def booked_guests(
    db: Session,
    day: date,
    slot: str,
    *,
    exclude_id: int | None = None,
    lock: bool = False,
) -> int:
    """Sum guests of confirmed reservations overlapping the slot on ``day``."""
    duration = timedelta(minutes=settings.reservation_duration_minutes)
    requested_start: datetime = slot_start(day, slot)
    requested_end: datetime = requested_start + duration

    query = select(Reservation).where(
        Reservation.date == day,
        Reservation.status.in_(BLOCKING_STATUSES),
    )
    if exclude_id is not None:
        query = query.where(Reservation.id != exclude_id)
    if lock:
        query = query.with_for_update()

    total: int = 0
    for reservation in db.scalars(query):
        start: datetime = slot_start(reservation.date, reservation.time)
        if _ranges_overlap(requested_start, requested_end, start, start + duration):
            total += reservation.guests
    return total


def check_availability(
    db: Session,
    day: date,
    slot: str,
    guests: int,
    *,
    exclude_id: int | None = None,
    lock: bool = False,
) -> AvailabilityReport:
    report = AvailabilityReport(
        date=day,
        time=slot,
        guests=guests,
        capacity=total_capacity(db),
        booked=booked_guests(db, day, slot, exclude_id=exclude_id, lock=lock),
    )
    logger.debug(
        "[AVAILABILITY] %s %s guests=%s booked=%s capacity=%s",
        day.isoformat(),
        slot,
        guests,
        report.booked,
        report.capacity,
    )
    return report


def is_available(db: Session, day: date, slot: str, guests: int, *, exclude_id: int | None = None) -> bool:
    return check_availability(db, day, slot, guests, exclude_id=exclude_id).available


SLOT_LOCK_POOL_SIZE: int = 64
_slot_locks: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(SLOT_LOCK_POOL_SIZE))


def lock_for(day: date) -> threading.Lock:
    """Return the pooled lock guarding ``day``; distinct dates may share one."""
    return _slot_locks[day.toordinal() % SLOT_LOCK_POOL_SIZE]


@contextmanager
def slot_lock(day: date) -> Iterator[None]:
    """Serialize check-then-confirm sequences for one service date in this process."""
    with lock_for(day):
        yield
