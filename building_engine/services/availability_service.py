"""Reservation conflict detection and the amenity booking workflow."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from building_engine.domain.models import (
    Amenity,
    AmenityStatus,
    Reservation,
    ReservationStatus,
    Slot,
    TimeOfDay,
)
from building_engine.services.slot_service import slots_for_amenity
from building_engine.utils.config import Settings, get_settings
from building_engine.utils.dates import week_of
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)


class BookingError(Exception):
    """Base exception for booking workflow failures."""


class BookingValidationError(BookingError):
    """Raised when a booking request cannot be offered by the amenity."""


class BookingConflictError(BookingError):
    """Raised when the requested slot is already held by an active reservation."""

    def __init__(self, message: str, conflicts: list[Reservation]) -> None:
        super().__init__(message)
        self.conflicts = conflicts


def intervals_overlap(
    first_start: TimeOfDay,
    first_end: TimeOfDay,
    second_start: TimeOfDay,
    second_end: TimeOfDay,
) -> bool:
    """Half-open overlap test; touching intervals do not overlap.

    The single comparison covers all three shapes: the second interval
    starting inside the first, ending inside it, or containing it.
    """
    return first_start < second_end and second_start < first_end


def conflicting_reservations(
    slot: Slot,
    on_date: date,
    reservations: Iterable[Reservation],
) -> list[Reservation]:
    return [
        reservation
        for reservation in reservations
        if reservation.booking_date == on_date
        and reservation.is_active
        and intervals_overlap(slot.start, slot.end, reservation.start, reservation.end)
    ]


def is_available(slot: Slot, on_date: date, reservations: Iterable[Reservation]) -> bool:
    return not conflicting_reservations(slot, on_date, reservations)


@dataclass(frozen=True)
class SlotAvailability:
    slot: Slot
    booking_date: date
    is_available: bool

    def to_dict(self) -> dict[str, str | bool]:
        return {
            "date": self.booking_date.isoformat(),
            "start": str(self.slot.start),
            "end": str(self.slot.end),
            "is_available": self.is_available,
        }


@dataclass(frozen=True)
class DayGrid:
    booking_date: date
    slots: list[SlotAvailability]

    @property
    def available_count(self) -> int:
        return sum(1 for item in self.slots if item.is_available)


def availability_for_day(
    slots: Iterable[Slot],
    on_date: date,
    reservations: Iterable[Reservation],
) -> list[SlotAvailability]:
    day_reservations = [
        reservation
        for reservation in reservations
        if reservation.booking_date == on_date and reservation.is_active
    ]
    return [
        SlotAvailability(
            slot=slot,
            booking_date=on_date,
            is_available=is_available(slot, on_date, day_reservations),
        )
        for slot in slots
    ]


@dataclass(frozen=True)
class BookingRequest:
    booking_date: date
    start: TimeOfDay
    end: TimeOfDay
    guests: int = 0
    reservation_id: Optional[str] = None


class BookingService:
    """Builds bookable grids and gates booking submission for one amenity at a time.

    Every call works on the reservation snapshot handed in by the caller.
    ``submit_booking`` must be re-run against a fresh snapshot at submit time
    so that two residents racing for the same slot cannot both succeed.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @staticmethod
    def _reservations_for(
        amenity: Amenity,
        reservations: Iterable[Reservation],
    ) -> list[Reservation]:
        return [
            reservation
            for reservation in reservations
            if reservation.amenity_id is None or reservation.amenity_id == amenity.amenity_id
        ]

    def day_grid(
        self,
        amenity: Amenity,
        on_date: date,
        reservations: Iterable[Reservation],
    ) -> DayGrid:
        slots = slots_for_amenity(amenity, settings=self._settings)
        relevant = self._reservations_for(amenity, reservations)
        return DayGrid(
            booking_date=on_date,
            slots=availability_for_day(slots, on_date, relevant),
        )

    def week_grid(
        self,
        amenity: Amenity,
        anchor: date,
        reservations: Iterable[Reservation],
    ) -> list[DayGrid]:
        slots = slots_for_amenity(amenity, settings=self._settings)
        relevant = self._reservations_for(amenity, reservations)
        return [
            DayGrid(booking_date=day, slots=availability_for_day(slots, day, relevant))
            for day in week_of(anchor, self._settings.week_starts_on)
        ]

    def submit_booking(
        self,
        amenity: Amenity,
        request: BookingRequest,
        reservations: Iterable[Reservation],
    ) -> Reservation:
        """Re-check the requested slot and return the new reservation."""
        if amenity.status is not AmenityStatus.AVAILABLE:
            raise BookingValidationError(
                f"amenity '{amenity.amenity_id}' is {amenity.status.value} and cannot be booked"
            )
        if request.start >= request.end:
            raise BookingValidationError("booking start must be earlier than booking end")

        requested_slot = Slot(start=request.start, end=request.end)
        if requested_slot not in slots_for_amenity(amenity, settings=self._settings):
            raise BookingValidationError(
                f"slot {request.start}-{request.end} is not offered by amenity '{amenity.amenity_id}'"
            )
        if request.guests < 0:
            raise BookingValidationError("guests must be >= 0")
        if amenity.capacity is not None and request.guests > amenity.capacity:
            raise BookingValidationError(
                f"guests={request.guests} exceeds amenity capacity={amenity.capacity}"
            )

        conflicts = conflicting_reservations(
            requested_slot,
            request.booking_date,
            self._reservations_for(amenity, reservations),
        )
        if conflicts:
            logger.info(
                "Booking rejected | reason=conflict | amenity_id=%s | date=%s | slot=%s-%s | conflicts=%s",
                amenity.amenity_id,
                request.booking_date.isoformat(),
                request.start,
                request.end,
                len(conflicts),
            )
            raise BookingConflictError(
                f"slot {request.start}-{request.end} on {request.booking_date.isoformat()} "
                "is no longer available",
                conflicts=conflicts,
            )

        status = (
            ReservationStatus.PENDING if amenity.requires_payment else ReservationStatus.APPROVED
        )
        reservation = Reservation(
            booking_date=request.booking_date,
            start=request.start,
            end=request.end,
            status=status,
            reservation_id=request.reservation_id,
            amenity_id=amenity.amenity_id,
            guests=request.guests,
        )
        logger.info(
            "Booking accepted | amenity_id=%s | date=%s | slot=%s-%s | status=%s",
            amenity.amenity_id,
            request.booking_date.isoformat(),
            request.start,
            request.end,
            status.value,
        )
        return reservation
