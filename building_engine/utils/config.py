"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    default_slot_duration_hours: float
    forecast_horizon_years: int
    due_soon_window_years: int
    default_risk_rating: str
    week_starts_on: int
    next_occurrence_search_months: int
    server_host: str
    server_port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests call ``cache_clear()``."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Building Engine"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        default_slot_duration_hours=_env_float("DEFAULT_SLOT_DURATION_HOURS", 1.0),
        forecast_horizon_years=_env_int("FORECAST_HORIZON_YEARS", 10),
        due_soon_window_years=_env_int("DUE_SOON_WINDOW_YEARS", 3),
        default_risk_rating=os.getenv("DEFAULT_RISK_RATING", "medium"),
        # Python weekday numbering: Monday=0 ... Sunday=6.
        week_starts_on=_env_int("WEEK_STARTS_ON", 6),
        next_occurrence_search_months=_env_int("NEXT_OCCURRENCE_SEARCH_MONTHS", 120),
        server_host=os.getenv("SERVER_HOST", "127.0.0.1"),
        server_port=_env_int("SERVER_PORT", 8000),
    )
