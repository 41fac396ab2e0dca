"""HTTP controller layer for amenity slot grids and booking submission."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from building_engine.controllers.dependencies import get_booking_service
from building_engine.domain.models import (
    Amenity,
    AmenityStatus,
    Reservation,
    ReservationStatus,
    TimeOfDay,
)
from building_engine.services.availability_service import (
    BookingConflictError,
    BookingRequest,
    BookingService,
    BookingValidationError,
    DayGrid,
)
from building_engine.services.slot_service import SlotValidationError


TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

router = APIRouter(prefix="/bookings", tags=["bookings"])


class AmenityPayload(BaseModel):
    amenity_id: str = Field(min_length=1)
    name: str = ""
    available_from: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)
    available_to: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)
    slot_duration_hours: Optional[float] = Field(default=None, gt=0.0, le=24.0)
    capacity: Optional[int] = Field(default=None, ge=0)
    booking_fee: Decimal = Field(default=Decimal("0"), ge=0)
    status: AmenityStatus = AmenityStatus.AVAILABLE

    def to_domain(self) -> Amenity:
        return Amenity(
            amenity_id=self.amenity_id,
            name=self.name,
            available_from=(
                TimeOfDay.from_string(self.available_from) if self.available_from else None
            ),
            available_to=TimeOfDay.from_string(self.available_to) if self.available_to else None,
            slot_duration_hours=self.slot_duration_hours,
            capacity=self.capacity,
            booking_fee=self.booking_fee,
            status=self.status,
        )


class ReservationPayload(BaseModel):
    id: Optional[str] = None
    amenity_id: Optional[str] = None
    booking_date: date
    start_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    end_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    status: ReservationStatus = ReservationStatus.PENDING
    guests: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_time_order(self) -> ReservationPayload:
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be earlier than end_time")
        return self

    def to_domain(self) -> Reservation:
        return Reservation(
            booking_date=self.booking_date,
            start=TimeOfDay.from_string(self.start_time),
            end=TimeOfDay.from_string(self.end_time),
            status=self.status,
            reservation_id=self.id,
            amenity_id=self.amenity_id,
            guests=self.guests,
        )


class SlotGridRequest(BaseModel):
    amenity: AmenityPayload
    date: date
    reservations: list[ReservationPayload] = Field(default_factory=list)


class WeekGridRequest(BaseModel):
    amenity: AmenityPayload
    anchor_date: date
    reservations: list[ReservationPayload] = Field(default_factory=list)


class SlotRow(BaseModel):
    start: str
    end: str
    is_available: bool


class DayGridResponse(BaseModel):
    date: date
    available_count: int = Field(ge=0)
    slots: list[SlotRow]


class WeekGridResponse(BaseModel):
    days: list[DayGridResponse]


class BookingSubmitRequest(BaseModel):
    amenity: AmenityPayload
    booking_date: date
    start_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    end_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    guests: int = Field(default=0, ge=0)
    reservation_id: Optional[str] = None
    reservations: list[ReservationPayload] = Field(default_factory=list)


class ReservationResponse(BaseModel):
    id: Optional[str]
    amenity_id: Optional[str]
    booking_date: date
    start_time: str
    end_time: str
    status: ReservationStatus
    guests: int


def _to_day_response(grid: DayGrid) -> DayGridResponse:
    return DayGridResponse(
        date=grid.booking_date,
        available_count=grid.available_count,
        slots=[
            SlotRow(start=str(item.slot.start), end=str(item.slot.end), is_available=item.is_available)
            for item in grid.slots
        ],
    )


def _invalid_window(exc: SlotValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/slots", response_model=DayGridResponse, status_code=status.HTTP_200_OK)
async def slot_grid(
    payload: SlotGridRequest,
    service: BookingService = Depends(get_booking_service),
) -> DayGridResponse:
    try:
        grid = service.day_grid(
            payload.amenity.to_domain(),
            payload.date,
            [reservation.to_domain() for reservation in payload.reservations],
        )
    except SlotValidationError as exc:
        raise _invalid_window(exc) from exc
    return _to_day_response(grid)


@router.post("/week", response_model=WeekGridResponse, status_code=status.HTTP_200_OK)
async def week_grid(
    payload: WeekGridRequest,
    service: BookingService = Depends(get_booking_service),
) -> WeekGridResponse:
    try:
        grids = service.week_grid(
            payload.amenity.to_domain(),
            payload.anchor_date,
            [reservation.to_domain() for reservation in payload.reservations],
        )
    except SlotValidationError as exc:
        raise _invalid_window(exc) from exc
    return WeekGridResponse(days=[_to_day_response(grid) for grid in grids])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def submit_booking(
    payload: BookingSubmitRequest,
    service: BookingService = Depends(get_booking_service),
) -> ReservationResponse:
    """Re-check availability against the supplied snapshot before accepting."""
    request = BookingRequest(
        booking_date=payload.booking_date,
        start=TimeOfDay.from_string(payload.start_time),
        end=TimeOfDay.from_string(payload.end_time),
        guests=payload.guests,
        reservation_id=payload.reservation_id,
    )
    try:
        reservation = service.submit_booking(
            payload.amenity.to_domain(),
            request,
            [item.to_domain() for item in payload.reservations],
        )
    except BookingConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except BookingValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SlotValidationError as exc:
        raise _invalid_window(exc) from exc

    return ReservationResponse(
        id=reservation.reservation_id,
        amenity_id=reservation.amenity_id,
        booking_date=reservation.booking_date,
        start_time=str(reservation.start),
        end_time=str(reservation.end),
        status=reservation.status,
        guests=reservation.guests,
    )
