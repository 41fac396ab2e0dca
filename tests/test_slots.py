from __future__ import annotations

from dataclasses import replace

import pytest

from building_engine.domain.models import Amenity, Slot, TimeOfDay
from building_engine.services.slot_service import (
    SlotValidationError,
    generate_slots,
    slots_for_amenity,
)
from building_engine.utils.config import get_settings


def _t(value: str) -> TimeOfDay:
    return TimeOfDay.from_string(value)


def _labels(slots: list[Slot]) -> list[tuple[str, str]]:
    return [(str(slot.start), str(slot.end)) for slot in slots]


def test_full_day_hourly_slots() -> None:
    slots = generate_slots(_t("06:00"), _t("22:00"), 1)

    assert len(slots) == 16
    assert _labels(slots)[0] == ("06:00", "07:00")
    assert _labels(slots)[-1] == ("21:00", "22:00")


def test_fractional_hours_carry_into_minutes() -> None:
    slots = generate_slots(_t("09:00"), _t("12:00"), 1.5)

    assert _labels(slots) == [("09:00", "10:30"), ("10:30", "12:00")]


def test_quarter_hours_carry_across_hour_boundary() -> None:
    slots = generate_slots(_t("08:15"), _t("10:30"), 0.75)

    assert _labels(slots) == [("08:15", "09:00"), ("09:00", "09:45"), ("09:45", "10:30")]


def test_trailing_partial_slot_is_dropped() -> None:
    slots = generate_slots(_t("09:00"), _t("12:00"), 2)

    assert _labels(slots) == [("09:00", "11:00")]


def test_slots_never_run_past_close() -> None:
    close_time = _t("17:40")
    slots = generate_slots(_t("08:15"), close_time, 0.75)

    assert slots
    assert all(slot.end <= close_time for slot in slots)


def test_slot_running_to_midnight_is_dropped() -> None:
    assert generate_slots(_t("23:00"), _t("23:59"), 1) == []


def test_generation_is_deterministic() -> None:
    first = generate_slots(_t("07:30"), _t("20:00"), 1.25)
    second = generate_slots(_t("07:30"), _t("20:00"), 1.25)

    assert first == second


def test_empty_window_returns_no_slots() -> None:
    assert generate_slots(_t("10:00"), _t("10:00"), 1) == []


@pytest.mark.parametrize("duration", [0, -1, -0.5, float("nan")])
def test_non_positive_duration_returns_no_slots(duration: float) -> None:
    assert generate_slots(_t("06:00"), _t("22:00"), duration) == []


def test_inverted_window_raises() -> None:
    with pytest.raises(SlotValidationError):
        generate_slots(_t("22:00"), _t("06:00"), 1)


def test_amenity_without_hours_offers_no_slots() -> None:
    amenity = Amenity(amenity_id="gym", name="Gym", available_from=_t("06:00"))

    assert slots_for_amenity(amenity) == []


def test_amenity_falls_back_to_configured_duration() -> None:
    settings = replace(get_settings(), default_slot_duration_hours=2.0)
    amenity = Amenity(
        amenity_id="bbq",
        name="BBQ Area",
        available_from=_t("10:00"),
        available_to=_t("16:00"),
    )

    slots = slots_for_amenity(amenity, settings=settings)

    assert _labels(slots) == [("10:00", "12:00"), ("12:00", "14:00"), ("14:00", "16:00")]


def test_midnight_close_is_an_inverted_window() -> None:
    with pytest.raises(SlotValidationError):
        generate_slots(TimeOfDay(18, 0), TimeOfDay.from_string("00:00"), 1.0)


def test_late_evening_close_keeps_last_whole_slot() -> None:
    slots = generate_slots(TimeOfDay(18, 0), TimeOfDay(23, 59), 1.0)

    assert len(slots) == 5
    assert slots[-1] == Slot(start=TimeOfDay(22, 0), end=TimeOfDay(23, 0))
