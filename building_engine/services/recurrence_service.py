"""Recurrence rule evaluation for maintenance schedules.

Rules are anchored on the day of month of their start date. A date is an
occurrence when it falls on that day of month and the whole-month distance
from the anchor is a multiple of the period. There is no end-of-month
clamping: a rule anchored on the 31st never occurs in a 30-day month.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import MONTHLY, rrule

from building_engine.domain.models import RecurrencePeriod, RecurrenceRule
from building_engine.utils.config import get_settings
from building_engine.utils.dates import months_between, parse_date
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)


def period_interval_months(period: RecurrencePeriod) -> int:
    """Months between consecutive occurrences; ``0`` for one-time rules."""
    if period is RecurrencePeriod.ONE_TIME:
        return 0
    if period is RecurrencePeriod.MONTHLY:
        return 1
    if period is RecurrencePeriod.BI_MONTHLY:
        return 2
    if period is RecurrencePeriod.QUARTERLY:
        return 3
    if period is RecurrencePeriod.HALF_YEARLY:
        return 6
    if period is RecurrencePeriod.YEARLY:
        # Same month in any later year.
        return 12
    raise AssertionError(f"unhandled recurrence period {period!r}")


def occurs_on(rule: RecurrenceRule, query_date: Any) -> bool:
    """Return whether ``query_date`` is an occurrence of ``rule``.

    The rule's start and end dates always match once reached, even when the
    end date does not fall on the anchor day. Unparseable dates never match.
    """
    query = parse_date(query_date)
    start = rule.start_date
    if start is None or query is None:
        return False
    if query < start:
        return False
    if query == start or query == rule.end_date:
        return True
    if not rule.never_expires and rule.end_date is not None and query > rule.end_date:
        return False

    interval = period_interval_months(rule.period)
    if interval == 0:
        return False
    if query.day != start.day:
        return False
    return months_between(start, query) % interval == 0


def occurrences_between(rule: RecurrenceRule, start: date, end: date) -> list[date]:
    """Every occurrence of ``rule`` within ``[start, end]``, ascending."""
    anchor = rule.start_date
    if anchor is None or end < start:
        return []

    candidates: set[date] = {anchor}
    if rule.end_date is not None:
        candidates.add(rule.end_date)

    interval = period_interval_months(rule.period)
    if interval:
        # bymonthday skips months that lack the anchor day.
        schedule = rrule(
            MONTHLY,
            interval=interval,
            dtstart=datetime.combine(anchor, time.min),
            bymonthday=anchor.day,
            until=datetime.combine(end, time.min),
        )
        candidates.update(
            moment.date()
            for moment in schedule.between(
                datetime.combine(start, time.min),
                datetime.combine(end, time.min),
                inc=True,
            )
        )

    return sorted(
        candidate
        for candidate in candidates
        if start <= candidate <= end and occurs_on(rule, candidate)
    )


def next_occurrence(
    rule: RecurrenceRule,
    on_or_after: date,
    search_months: Optional[int] = None,
) -> Optional[date]:
    """First occurrence on or after ``on_or_after`` within the search horizon."""
    months = search_months if search_months is not None else get_settings().next_occurrence_search_months
    horizon_end = on_or_after + relativedelta(months=months)
    upcoming = occurrences_between(rule, on_or_after, horizon_end)
    if not upcoming:
        logger.debug(
            "No upcoming occurrence | rule_id=%s | from=%s | search_months=%s",
            rule.rule_id,
            on_or_after.isoformat(),
            months,
        )
        return None
    return upcoming[0]
