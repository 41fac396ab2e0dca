"""Domain-level validation rules for slot generation and capital forecasting."""

from __future__ import annotations

import math
from dataclasses import dataclass

from building_engine.domain.models import TimeOfDay


@dataclass(frozen=True)
class OperatingWindow:
    open_time: TimeOfDay
    close_time: TimeOfDay
    slot_duration_hours: float

    @property
    def slot_duration_minutes(self) -> int:
        """Slot length with the fractional hour carried into minutes.

        Non-positive or non-finite durations collapse to ``0``.
        """
        hours = float(self.slot_duration_hours)
        if not math.isfinite(hours) or hours <= 0.0:
            return 0
        return int(round(hours * 60))


@dataclass(frozen=True)
class ForecastConfig:
    horizon_years: int
    due_soon_window_years: int


def validate_operating_window(window: OperatingWindow) -> None:
    if window.open_time > window.close_time:
        raise ValueError(
            f"open_time {window.open_time} must not be later than close_time {window.close_time}"
        )


def validate_forecast_config(config: ForecastConfig) -> None:
    if config.horizon_years < 0:
        raise ValueError("horizon_years must be >= 0")
    if config.due_soon_window_years < 0:
        raise ValueError("due_soon_window_years must be >= 0")
