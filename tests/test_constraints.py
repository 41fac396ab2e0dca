"""Tests for operating-window and forecast configuration validation."""

from __future__ import annotations

import pytest

from building_engine.domain.constraints import (
    ForecastConfig,
    OperatingWindow,
    validate_forecast_config,
    validate_operating_window,
)
from building_engine.domain.models import TimeOfDay


def window(open_time: str = "06:00", close_time: str = "22:00", hours: float = 1.0) -> OperatingWindow:
    return OperatingWindow(
        open_time=TimeOfDay.from_string(open_time),
        close_time=TimeOfDay.from_string(close_time),
        slot_duration_hours=hours,
    )


def test_valid_window_passes() -> None:
    validate_operating_window(window())


def test_empty_window_passes() -> None:
    """Equal bounds are an empty window, not a contract breach."""
    validate_operating_window(window("10:00", "10:00"))


def test_inverted_window_raises() -> None:
    with pytest.raises(ValueError):
        validate_operating_window(window("22:00", "06:00"))


@pytest.mark.parametrize(
    ("hours", "minutes"),
    [(1.0, 60), (1.5, 90), (0.25, 15), (0.1, 6), (0.0, 0), (-2.0, 0), (float("inf"), 0)],
)
def test_slot_duration_minutes(hours: float, minutes: int) -> None:
    assert window(hours=hours).slot_duration_minutes == minutes


def test_valid_forecast_config_passes() -> None:
    validate_forecast_config(ForecastConfig(horizon_years=10, due_soon_window_years=3))


def test_zero_forecast_values_pass() -> None:
    validate_forecast_config(ForecastConfig(horizon_years=0, due_soon_window_years=0))


def test_negative_horizon_raises() -> None:
    with pytest.raises(ValueError):
        validate_forecast_config(ForecastConfig(horizon_years=-1, due_soon_window_years=3))


def test_negative_due_soon_window_raises() -> None:
    with pytest.raises(ValueError):
        validate_forecast_config(ForecastConfig(horizon_years=10, due_soon_window_years=-1))
