"""Capacity-aggregate availability tests."""

from datetime import date
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bistro.core.config import settings
from bistro.db.base import Base
from bistro.models.reservation import Reservation, Table
from bistro.services import availability

SERVICE_DAY = date(2026, 6, 12)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _session(tmp_path: Path, name: str) -> Session:
    engine = _build_test_engine(tmp_path / name)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return testing_session_local()


def _reservation(time_value: str, guests: int, status: str = "pending") -> Reservation:
    return Reservation(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        date=SERVICE_DAY,
        time=time_value,
        guests=guests,
        status=status,
        is_confirmed=status == "confirmed",
    )


def test_boundary_capacity_is_inclusive(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_boundary.db")
    try:
        session.add_all([Table(name="T1", capacity=4), Table(name="T2", capacity=6)])
        session.add(_reservation("19:00", 6, "confirmed"))
        session.commit()

        assert availability.is_available(session, SERVICE_DAY, "19:00", 4) is True
        assert availability.is_available(session, SERVICE_DAY, "19:00", 5) is False

        report = availability.check_availability(session, SERVICE_DAY, "19:00", 4)
        assert report.capacity == 10
        assert report.booked == 6
        assert report.remaining == 4
    finally:
        session.close()


def test_cancelled_reservations_do_not_block(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_cancelled.db")
    try:
        session.add(Table(name="T1", capacity=4))
        session.add(_reservation("20:00", 4, "cancelled"))
        session.commit()

        assert availability.booked_guests(session, SERVICE_DAY, "20:00") == 0
        assert availability.is_available(session, SERVICE_DAY, "20:00", 4) is True
    finally:
        session.close()


def test_pending_requests_hold_no_seats(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_pending.db")
    try:
        session.add_all([Table(name=f"T{index}", capacity=10) for index in range(1, 5)])
        session.add(_reservation("19:00", 50))
        session.add(_reservation("19:00", 12, "completed"))
        session.add(_reservation("19:00", 12, "no_show"))
        session.commit()

        assert availability.booked_guests(session, SERVICE_DAY, "19:00") == 0
        assert availability.is_available(session, SERVICE_DAY, "19:00", 40) is True
    finally:
        session.close()


def test_confirmed_reservation_being_rechecked_is_excluded(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_exclude.db")
    try:
        session.add(Table(name="T1", capacity=4))
        confirmed = _reservation("20:00", 4, "confirmed")
        session.add(confirmed)
        session.commit()

        assert availability.is_available(session, SERVICE_DAY, "20:00", 1) is False
        assert availability.is_available(session, SERVICE_DAY, "20:00", 4, exclude_id=confirmed.id) is True
    finally:
        session.close()


def test_other_slots_and_days_do_not_conflict(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_slots.db")
    try:
        session.add(Table(name="T1", capacity=4))
        session.add(_reservation("19:00", 4, "confirmed"))
        session.commit()

        assert availability.is_available(session, SERVICE_DAY, "19:30", 4) is True
        assert availability.is_available(session, date(2026, 6, 13), "19:00", 4) is True
    finally:
        session.close()


def test_longer_duration_blocks_overlapping_slots(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "reservation_duration_minutes", 90)
    session = _session(tmp_path, "availability_overlap.db")
    try:
        session.add(Table(name="T1", capacity=4))
        session.add(_reservation("19:00", 4, "confirmed"))
        session.commit()

        assert availability.is_available(session, SERVICE_DAY, "18:00", 4) is False
        assert availability.is_available(session, SERVICE_DAY, "20:00", 4) is False
        assert availability.is_available(session, SERVICE_DAY, "20:30", 4) is True
        assert availability.is_available(session, SERVICE_DAY, "17:30", 4) is True
    finally:
        session.close()


def test_no_tables_means_no_capacity(tmp_path: Path) -> None:
    session = _session(tmp_path, "availability_empty.db")
    try:
        report = availability.check_availability(session, SERVICE_DAY, "19:00", 1)

        assert report.capacity == 0
        assert report.available is False
    finally:
        session.close()


def test_slot_locks_come_from_a_bounded_pool() -> None:
    first = availability.lock_for(SERVICE_DAY)

    assert availability.lock_for(date(2026, 6, 12)) is first
    assert availability.lock_for(date(2026, 6, 13)) is not first
    pooled = {id(availability.lock_for(date.fromordinal(SERVICE_DAY.toordinal() + offset))) for offset in range(1000)}
    assert len(pooled) == availability.SLOT_LOCK_POOL_SIZE
