"""Asset lifecycle metrics and multi-year capital replacement forecasting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

import pandas as pd

from building_engine.domain.constraints import ForecastConfig, validate_forecast_config
from building_engine.domain.models import AssetRecord
from building_engine.utils.config import Settings, get_settings
from building_engine.utils.dates import parse_date, whole_years_between
from building_engine.utils.logger import get_logger, log_degraded_record


logger = get_logger(__name__)


class ForecastValidationError(Exception):
    """Raised when forecast horizon parameters are invalid."""


@dataclass(frozen=True)
class LifecycleSnapshot:
    """Derived age view of an asset as of a given date.

    ``replacement_year`` is ``None`` when the asset record lacks an install
    date or lifespan; every other field is zero in that case.
    """

    age: int
    remaining_life: int
    replacement_year: Optional[int]
    percent_used: float

    @property
    def is_known(self) -> bool:
        return self.replacement_year is not None

    @property
    def is_critical(self) -> bool:
        return self.is_known and self.remaining_life <= 0

    def is_due_soon(self, window_years: int) -> bool:
        return self.is_known and 0 <= self.remaining_life <= window_years

    def to_dict(self) -> dict[str, Any]:
        return {
            "age": self.age,
            "remaining_life": self.remaining_life,
            "replacement_year": self.replacement_year,
            "percent_used": self.percent_used,
            "is_critical": self.is_critical,
        }


UNKNOWN_LIFECYCLE = LifecycleSnapshot(age=0, remaining_life=0, replacement_year=None, percent_used=0.0)


def compute_lifecycle(install_date: Any, lifespan_years: Optional[int], as_of: date) -> LifecycleSnapshot:
    installed = parse_date(install_date)
    if installed is None or not lifespan_years or lifespan_years <= 0:
        return UNKNOWN_LIFECYCLE

    # An install date in the future counts as a brand-new asset.
    age = max(0, whole_years_between(installed, as_of))
    remaining_life = max(0, lifespan_years - age)
    return LifecycleSnapshot(
        age=age,
        remaining_life=remaining_life,
        replacement_year=as_of.year + remaining_life,
        percent_used=min(100.0, 100.0 * age / lifespan_years),
    )


@dataclass(frozen=True)
class AssetForecastEntry:
    asset: AssetRecord
    lifecycle: LifecycleSnapshot
    risk_rating: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": self.asset.asset_id,
            "name": self.asset.name,
            "category": self.asset.category,
            "age": self.lifecycle.age,
            "remaining_life": self.lifecycle.remaining_life,
            "replacement_year": self.lifecycle.replacement_year,
            "replacement_cost": str(self.asset.replacement_cost),
            "risk_rating": self.risk_rating,
        }


@dataclass(frozen=True)
class ForecastBucket:
    year: int
    entries: tuple[AssetForecastEntry, ...] = ()

    @property
    def asset_count(self) -> int:
        return len(self.entries)

    @property
    def total_cost(self) -> Decimal:
        return sum((entry.asset.replacement_cost for entry in self.entries), Decimal("0"))


@dataclass(frozen=True)
class CapitalForecast:
    start_year: int
    end_year: int
    buckets: tuple[ForecastBucket, ...]
    total_assets: int
    critical: tuple[AssetForecastEntry, ...]
    due_soon: tuple[AssetForecastEntry, ...]

    @property
    def forecast_period(self) -> str:
        return f"{self.start_year} - {self.end_year}"

    @property
    def total_cost(self) -> Decimal:
        return sum((bucket.total_cost for bucket in self.buckets), Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "forecast_period": self.forecast_period,
            "total_assets": self.total_assets,
            "critical_assets": len(self.critical),
            "due_soon_assets": len(self.due_soon),
            "total_forecast_cost": str(self.total_cost),
            "yearly_breakdown": [
                {
                    "year": bucket.year,
                    "asset_count": bucket.asset_count,
                    "total_cost": str(bucket.total_cost),
                    "assets": [entry.to_dict() for entry in bucket.entries],
                }
                for bucket in self.buckets
            ],
        }


def build_capital_forecast(
    assets: Iterable[AssetRecord],
    as_of: date,
    horizon_years: int,
    due_soon_window_years: int,
    default_risk_rating: str = "medium",
) -> CapitalForecast:
    """Group assets into yearly replacement buckets over ``[year, year + horizon]``.

    Both horizon ends are inclusive, every year in range gets a bucket even
    when empty, and each asset lands in at most one bucket.
    """
    try:
        validate_forecast_config(
            ForecastConfig(horizon_years=horizon_years, due_soon_window_years=due_soon_window_years)
        )
    except ValueError as exc:
        raise ForecastValidationError(str(exc)) from exc

    start_year = as_of.year
    end_year = start_year + horizon_years
    by_year: dict[int, list[AssetForecastEntry]] = {
        year: [] for year in range(start_year, end_year + 1)
    }
    entries: list[AssetForecastEntry] = []

    for asset in assets:
        lifecycle = compute_lifecycle(asset.install_date, asset.lifespan_years, as_of)
        if not lifecycle.is_known:
            log_degraded_record(
                logger,
                "asset",
                "missing install date or lifespan",
                asset_id=asset.asset_id,
            )
        entry = AssetForecastEntry(
            asset=asset,
            lifecycle=lifecycle,
            risk_rating=asset.risk_rating or default_risk_rating,
        )
        entries.append(entry)
        year = lifecycle.replacement_year
        if year is not None and start_year <= year <= end_year:
            by_year[year].append(entry)

    forecast = CapitalForecast(
        start_year=start_year,
        end_year=end_year,
        buckets=tuple(
            ForecastBucket(year=year, entries=tuple(by_year[year])) for year in sorted(by_year)
        ),
        total_assets=len(entries),
        critical=tuple(entry for entry in entries if entry.lifecycle.is_critical),
        due_soon=tuple(
            entry for entry in entries if entry.lifecycle.is_due_soon(due_soon_window_years)
        ),
    )
    logger.info(
        "Capital forecast built | period=%s | assets=%s | bucketed=%s | total_cost=%s",
        forecast.forecast_period,
        forecast.total_assets,
        sum(bucket.asset_count for bucket in forecast.buckets),
        forecast.total_cost,
    )
    return forecast


def forecast_table(forecast: CapitalForecast) -> pd.DataFrame:
    """Yearly summary frame for the forecast table view."""
    frame = pd.DataFrame(
        [
            {
                "year": bucket.year,
                "asset_count": bucket.asset_count,
                "total_cost": float(bucket.total_cost),
            }
            for bucket in forecast.buckets
        ],
        columns=["year", "asset_count", "total_cost"],
    )
    frame["cumulative_cost"] = frame["total_cost"].cumsum()
    return frame


class CapitalPlanningService:
    """Applies configured horizon and due-soon defaults to forecasting."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def assess(self, asset: AssetRecord, as_of: date) -> LifecycleSnapshot:
        return compute_lifecycle(asset.install_date, asset.lifespan_years, as_of)

    def forecast(
        self,
        assets: Iterable[AssetRecord],
        as_of: date,
        horizon_years: Optional[int] = None,
        due_soon_window_years: Optional[int] = None,
    ) -> CapitalForecast:
        return build_capital_forecast(
            assets,
            as_of=as_of,
            horizon_years=(
                horizon_years
                if horizon_years is not None
                else self._settings.forecast_horizon_years
            ),
            due_soon_window_years=(
                due_soon_window_years
                if due_soon_window_years is not None
                else self._settings.due_soon_window_years
            ),
            default_risk_rating=self._settings.default_risk_rating,
        )
