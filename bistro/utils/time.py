"""Time helpers for timestamps and reservation slots."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

SLOT_MINUTES: int = 30


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime.

    SQLite hands back naive values for ``DateTime(timezone=True)`` columns, so
    anything read from the database goes through here before comparison.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_slot(value: str) -> time:
    """Parse an ``HH:MM`` slot string, dropping seconds if present."""
    parsed: time = time.fromisoformat(value.strip())
    return time(hour=parsed.hour, minute=parsed.minute)


def format_slot(value: time) -> str:
    return value.strftime("%H:%M")


def is_aligned_slot(value: time) -> bool:
    return value.minute % SLOT_MINUTES == 0 and value.second == 0


def slot_start(day: date, slot: str) -> datetime:
    return datetime.combine(day, parse_slot(slot))
