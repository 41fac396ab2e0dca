"""Per-day calendar projection over events, tasks, maintenance and resident moves."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from building_engine.domain.models import CalendarEvent, RecurrenceRule, ResidentMove, WorkItem
from building_engine.services.recurrence_service import occurs_on
from building_engine.utils.config import Settings, get_settings
from building_engine.utils.dates import iter_days, month_grid
from building_engine.utils.logger import get_logger, log_degraded_record


logger = get_logger(__name__)


class EventCategory(str, Enum):
    EVENT = "event"
    TASK = "task"
    MAINTENANCE = "maintenance"
    RESIDENT = "resident"


class MoveDirection(str, Enum):
    MOVE_IN = "move_in"
    MOVE_OUT = "move_out"


@dataclass(frozen=True)
class TaggedEvent:
    category: EventCategory
    source_id: Optional[str]
    title: str
    direction: Optional[MoveDirection] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "category": self.category.value,
            "source_id": self.source_id,
            "title": self.title,
            "direction": self.direction.value if self.direction is not None else None,
        }


@dataclass(frozen=True)
class CalendarSources:
    events: tuple[CalendarEvent, ...] = ()
    tasks: tuple[WorkItem, ...] = ()
    maintenance: tuple[RecurrenceRule, ...] = ()
    residents: tuple[ResidentMove, ...] = ()

    @classmethod
    def from_records(
        cls,
        events: Iterable[Mapping[str, Any]] = (),
        tasks: Iterable[Mapping[str, Any]] = (),
        maintenance: Iterable[Mapping[str, Any]] = (),
        residents: Iterable[Mapping[str, Any]] = (),
    ) -> CalendarSources:
        rules: list[RecurrenceRule] = []
        for record in maintenance:
            rule = RecurrenceRule.from_record(record)
            if rule is None:
                log_degraded_record(
                    logger,
                    "maintenance schedule",
                    "unknown recurrence keyword",
                    schedule_id=record.get("id"),
                    recurrence=record.get("recurrence"),
                )
                continue
            rules.append(rule)
        return cls(
            events=tuple(CalendarEvent.from_record(record) for record in events),
            tasks=tuple(WorkItem.from_record(record) for record in tasks),
            maintenance=tuple(rules),
            residents=tuple(ResidentMove.from_record(record) for record in residents),
        )


@dataclass(frozen=True)
class CalendarDayView:
    day: date
    in_month: bool
    events: list[TaggedEvent]

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "in_month": self.in_month,
            "events": [event.to_dict() for event in self.events],
        }


def _ad_hoc_events(day: date, events: Iterable[CalendarEvent]) -> list[TaggedEvent]:
    return [
        TaggedEvent(category=EventCategory.EVENT, source_id=event.event_id, title=event.title)
        for event in events
        if event.event_date == day
    ]


def _task_events(day: date, tasks: Iterable[WorkItem]) -> list[TaggedEvent]:
    return [
        TaggedEvent(category=EventCategory.TASK, source_id=task.item_id, title=task.title)
        for task in tasks
        if day in task.dates
    ]


def _maintenance_events(day: date, rules: Iterable[RecurrenceRule]) -> list[TaggedEvent]:
    return [
        TaggedEvent(category=EventCategory.MAINTENANCE, source_id=rule.rule_id, title=rule.title)
        for rule in rules
        if occurs_on(rule, day)
    ]


def _resident_events(day: date, residents: Iterable[ResidentMove]) -> list[TaggedEvent]:
    tagged: list[TaggedEvent] = []
    for resident in residents:
        if resident.move_in_date == day:
            tagged.append(
                TaggedEvent(
                    category=EventCategory.RESIDENT,
                    source_id=resident.resident_id,
                    title=resident.name,
                    direction=MoveDirection.MOVE_IN,
                )
            )
        if resident.move_out_date == day:
            tagged.append(
                TaggedEvent(
                    category=EventCategory.RESIDENT,
                    source_id=resident.resident_id,
                    title=resident.name,
                    direction=MoveDirection.MOVE_OUT,
                )
            )
    return tagged


def events_on_day(day: date, sources: CalendarSources) -> list[TaggedEvent]:
    """Everything scheduled on ``day``, grouped events, tasks, maintenance, residents."""
    return (
        _ad_hoc_events(day, sources.events)
        + _task_events(day, sources.tasks)
        + _maintenance_events(day, sources.maintenance)
        + _resident_events(day, sources.residents)
    )


class CalendarProjector:
    """Evaluates calendar sources for a rendered month or an arbitrary range."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def events_on_day(self, day: date, sources: CalendarSources) -> list[TaggedEvent]:
        return events_on_day(day, sources)

    def events_between(
        self,
        start: date,
        end: date,
        sources: CalendarSources,
    ) -> dict[date, list[TaggedEvent]]:
        """Days in ``[start, end]`` that have at least one event."""
        projected: dict[date, list[TaggedEvent]] = {}
        for day in iter_days(start, end):
            day_events = events_on_day(day, sources)
            if day_events:
                projected[day] = day_events
        return projected

    def project_month(self, year: int, month: int, sources: CalendarSources) -> list[CalendarDayView]:
        days = month_grid(year, month, self._settings.week_starts_on)
        views = [
            CalendarDayView(
                day=day,
                in_month=day.month == month,
                events=events_on_day(day, sources),
            )
            for day in days
        ]
        logger.debug(
            "Month projected | year=%s | month=%s | days=%s | busy_days=%s",
            year,
            month,
            len(views),
            sum(1 for view in views if view.events),
        )
        return views
