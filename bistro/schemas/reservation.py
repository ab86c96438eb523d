"""Reservation API schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from bistro.models.reservation import ReservationStatus
from bistro.schemas.order import UtcDatetime


class ReservationCreate(BaseModel):
    """Public reservation request; it is stored as pending regardless of capacity."""

    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, min_length=10, max_length=20)
    date: date
    time: str = Field(pattern=r"^\d{2}:\d{2}$")
    guests: int = Field(ge=1)
    message: str | None = Field(default=None, max_length=2000)


class ReservationConfirm(BaseModel):
    confirmation_message: str | None = Field(default=None, max_length=2000)


class ReservationResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None
    date: date
    time: str
    guests: int
    message: str | None
    status: ReservationStatus
    is_confirmed: bool
    confirmed_at: UtcDatetime | None
    confirmation_message: str | None
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class ReservationOutcome(BaseModel):
    """Result of a staff action on a reservation.

    ``outcome`` is ``confirmed``/``cancelled``/``updated`` when the client was
    notified, ``warning`` when the change stands but the notification failed.
    """

    success: bool = True
    outcome: str
    message: str
    reservation: ReservationResponse


class AvailabilityResponse(BaseModel):
    date: date
    time: str
    guests: int
    capacity: int
    booked: int
    remaining: int
    available: bool


class ReservationCreated(BaseModel):
    success: bool = True
    message: str
    reservation: ReservationResponse
    available: bool
