"""Reservation endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bistro.db.session import get_db
from bistro.models.reservation import Reservation
from bistro.schemas.reservation import (
    AvailabilityResponse,
    ReservationConfirm,
    ReservationCreate,
    ReservationCreated,
    ReservationOutcome,
    ReservationResponse,
)
from bistro.services import reservation_service
from bistro.services.availability import AvailabilityReport
from bistro.services.reservation_service import ReservationResult

router: APIRouter = APIRouter()


def _availability_response(report: AvailabilityReport) -> AvailabilityResponse:
    return AvailabilityResponse(
        date=report.date,
        time=report.time,
        guests=report.guests,
        capacity=report.capacity,
        booked=report.booked,
        remaining=report.remaining,
        available=report.available,
    )


def _outcome_response(result: ReservationResult, done: str, warning: str) -> ReservationOutcome:
    return ReservationOutcome(
        outcome=result.outcome,
        message=done if result.notified else warning,
        reservation=ReservationResponse.model_validate(result.reservation),
    )


@router.get("/availability", response_model=AvailabilityResponse)
def check_availability(
    date_value: date = Query(alias="date"),
    time_value: str = Query(alias="time"),
    guests: int = Query(ge=1),
    db: Session = Depends(get_db),
) -> AvailabilityResponse:
    """Informational check; the booking form may still submit when it says no."""
    return _availability_response(reservation_service.check_slot(db, date_value, time_value, guests))


@router.post("", response_model=ReservationCreated, status_code=status.HTTP_201_CREATED)
def create_reservation(payload: ReservationCreate, db: Session = Depends(get_db)) -> ReservationCreated:
    report: AvailabilityReport = reservation_service.check_slot(db, payload.date, payload.time, payload.guests)
    reservation: Reservation = reservation_service.create_reservation(db, payload)
    return ReservationCreated(
        message="Reservation request received; we will confirm it shortly.",
        reservation=ReservationResponse.model_validate(reservation),
        available=report.available,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(reservation_id: int, db: Session = Depends(get_db)) -> Reservation:
    return reservation_service.get_reservation(db, reservation_id)


@router.post("/{reservation_id}/confirm", response_model=ReservationOutcome)
def confirm_reservation(
    reservation_id: int,
    payload: ReservationConfirm | None = None,
    db: Session = Depends(get_db),
) -> ReservationOutcome:
    message: str | None = payload.confirmation_message if payload is not None else None
    result: ReservationResult = reservation_service.confirm_reservation(db, reservation_id, message)
    return _outcome_response(
        result,
        done="Reservation confirmed and client notified.",
        warning="Reservation confirmed, but the client could not be notified.",
    )


@router.post("/{reservation_id}/cancel", response_model=ReservationOutcome)
def cancel_reservation(reservation_id: int, db: Session = Depends(get_db)) -> ReservationOutcome:
    result: ReservationResult = reservation_service.cancel_reservation(db, reservation_id)
    return _outcome_response(
        result,
        done="Reservation cancelled and client notified.",
        warning="Reservation cancelled, but the client could not be notified.",
    )


@router.post("/{reservation_id}/advance", response_model=ReservationResponse)
def advance_status(reservation_id: int, db: Session = Depends(get_db)) -> Reservation:
    """Cycle to the next status, as the staff status badge does."""
    return reservation_service.cycle_reservation_status(db, reservation_id)
