"""Candidate slot generation for bookable amenities."""

from __future__ import annotations

from typing import Optional

from building_engine.domain.constraints import OperatingWindow, validate_operating_window
from building_engine.domain.models import Amenity, Slot, TimeOfDay
from building_engine.utils.config import Settings, get_settings
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)


class SlotGenerationError(Exception):
    """Base exception for slot generation failures."""


class SlotValidationError(SlotGenerationError):
    """Raised when an operating window violates the caller contract."""


def generate_slots(
    open_time: TimeOfDay,
    close_time: TimeOfDay,
    slot_duration_hours: float,
) -> list[Slot]:
    """Split ``[open_time, close_time)`` into back-to-back slots.

    Slots start at ``open_time`` and advance by the slot duration. A final
    slot that would run past ``close_time`` is dropped rather than shortened.
    An empty window or a non-positive duration yields no slots; an inverted
    window raises ``SlotValidationError``.
    """
    window = OperatingWindow(
        open_time=open_time,
        close_time=close_time,
        slot_duration_hours=slot_duration_hours,
    )
    try:
        validate_operating_window(window)
    except ValueError as exc:
        raise SlotValidationError(str(exc)) from exc

    duration_minutes = window.slot_duration_minutes
    if duration_minutes <= 0 or open_time == close_time:
        return []

    close_minutes = close_time.total_minutes
    cursor = open_time.total_minutes
    slots: list[Slot] = []
    while cursor + duration_minutes <= close_minutes:
        slots.append(
            Slot(
                start=TimeOfDay.from_minutes(cursor),
                end=TimeOfDay.from_minutes(cursor + duration_minutes),
            )
        )
        cursor += duration_minutes
    return slots


def slots_for_amenity(amenity: Amenity, settings: Optional[Settings] = None) -> list[Slot]:
    """Generate an amenity's daily slots; amenities without hours offer none."""
    if amenity.available_from is None or amenity.available_to is None:
        logger.debug("Amenity has no operating hours | amenity_id=%s", amenity.amenity_id)
        return []

    resolved_settings = settings or get_settings()
    duration_hours = amenity.slot_duration_hours or resolved_settings.default_slot_duration_hours
    return generate_slots(amenity.available_from, amenity.available_to, duration_hours)
