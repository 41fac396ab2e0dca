"""Controller layer for calendar projection and capital replacement forecasts.

Source records are accepted as raw mappings so that one malformed row
degrades to "no marker" instead of rejecting the whole request.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from building_engine.controllers.dependencies import (
    get_calendar_projector,
    get_capital_planning_service,
)
from building_engine.domain.models import AssetRecord
from building_engine.services.calendar_service import (
    CalendarProjector,
    CalendarSources,
    TaggedEvent,
)
from building_engine.services.lifecycle_service import (
    CapitalPlanningService,
    ForecastValidationError,
)
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["planning"])


class CalendarSourcesPayload(BaseModel):
    events: list[dict[str, Any]] = Field(default_factory=list)
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    maintenance: list[dict[str, Any]] = Field(default_factory=list)
    residents: list[dict[str, Any]] = Field(default_factory=list)

    def to_domain(self) -> CalendarSources:
        return CalendarSources.from_records(
            events=self.events,
            tasks=self.tasks,
            maintenance=self.maintenance,
            residents=self.residents,
        )


class TaggedEventResponse(BaseModel):
    category: str
    source_id: Optional[str]
    title: str
    direction: Optional[str] = None


class DayEventsRequest(BaseModel):
    day: date
    sources: CalendarSourcesPayload = Field(default_factory=CalendarSourcesPayload)


class DayEventsResponse(BaseModel):
    day: date
    events: list[TaggedEventResponse]


class MonthRequest(BaseModel):
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    sources: CalendarSourcesPayload = Field(default_factory=CalendarSourcesPayload)


class CalendarDayResponse(BaseModel):
    day: date
    in_month: bool
    events: list[TaggedEventResponse]


class MonthResponse(BaseModel):
    year: int
    month: int
    days: list[CalendarDayResponse]


class ForecastRequest(BaseModel):
    as_of: date
    assets: list[dict[str, Any]] = Field(default_factory=list)
    horizon_years: Optional[int] = Field(default=None, ge=0, le=100)
    due_soon_window_years: Optional[int] = Field(default=None, ge=0, le=100)


class ForecastAssetRow(BaseModel):
    asset_id: str
    name: str
    category: str
    age: int = Field(ge=0)
    remaining_life: int = Field(ge=0)
    replacement_year: Optional[int]
    replacement_cost: Decimal
    risk_rating: str


class ForecastYearRow(BaseModel):
    year: int
    asset_count: int = Field(ge=0)
    total_cost: Decimal
    assets: list[ForecastAssetRow]


class ForecastResponse(BaseModel):
    forecast_period: str
    total_assets: int = Field(ge=0)
    critical_assets: int = Field(ge=0)
    due_soon_assets: int = Field(ge=0)
    total_forecast_cost: Decimal
    yearly_breakdown: list[ForecastYearRow]


def _to_event_rows(events: list[TaggedEvent]) -> list[TaggedEventResponse]:
    return [TaggedEventResponse(**event.to_dict()) for event in events]


@router.post("/calendar/day", response_model=DayEventsResponse, status_code=status.HTTP_200_OK)
async def calendar_day(
    payload: DayEventsRequest,
    projector: CalendarProjector = Depends(get_calendar_projector),
) -> DayEventsResponse:
    events = projector.events_on_day(payload.day, payload.sources.to_domain())
    return DayEventsResponse(day=payload.day, events=_to_event_rows(events))


@router.post("/calendar/month", response_model=MonthResponse, status_code=status.HTTP_200_OK)
async def calendar_month(
    payload: MonthRequest,
    projector: CalendarProjector = Depends(get_calendar_projector),
) -> MonthResponse:
    views = projector.project_month(payload.year, payload.month, payload.sources.to_domain())
    return MonthResponse(
        year=payload.year,
        month=payload.month,
        days=[CalendarDayResponse(**view.to_dict()) for view in views],
    )


@router.post("/capital/forecast", response_model=ForecastResponse, status_code=status.HTTP_200_OK)
async def capital_forecast(
    payload: ForecastRequest,
    service: CapitalPlanningService = Depends(get_capital_planning_service),
) -> ForecastResponse:
    assets = [AssetRecord.from_record(record) for record in payload.assets]
    try:
        forecast = service.forecast(
            assets,
            as_of=payload.as_of,
            horizon_years=payload.horizon_years,
            due_soon_window_years=payload.due_soon_window_years,
        )
    except ForecastValidationError as exc:
        logger.info("Forecast rejected | reason=%s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ForecastResponse(**forecast.to_dict())
