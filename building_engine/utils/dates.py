"""Shared calendar arithmetic used by every scheduling service."""

from __future__ import annotations

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Any, Iterator, Optional

from dateutil.relativedelta import relativedelta


def parse_date(value: Any) -> Optional[date]:
    """Coerce a record field into a ``date``.

    Accepts ``date``/``datetime`` instances and ISO strings (``YYYY-MM-DD``,
    optionally followed by a ``T`` or space separated time part). Anything
    else, including empty strings, yields ``None`` rather than raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if len(text) < 10:
        return None
    if len(text) > 10 and text[10] not in ("T", " "):
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def whole_years_between(start: date, end: date) -> int:
    """Complete years elapsed from ``start`` to ``end`` (negative if reversed)."""
    return relativedelta(end, start).years


def months_between(start: date, end: date) -> int:
    """Calendar-month distance, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_of(anchor: date, week_starts_on: int) -> list[date]:
    """Seven consecutive days, starting on ``week_starts_on``, that contain ``anchor``."""
    offset = (anchor.weekday() - week_starts_on) % 7
    start = anchor - timedelta(days=offset)
    return [start + timedelta(days=index) for index in range(7)]


def month_grid(year: int, month: int, week_starts_on: int) -> list[date]:
    """Whole weeks covering a month, padded with adjacent-month days.

    Padding that would fall outside the representable years (before January
    of year 1 or after December 9999) is left out.
    """
    weeks = calendar.Calendar(firstweekday=week_starts_on).itermonthdays3(year, month)
    return [date(y, m, d) for y, m, d in weeks if MINYEAR <= y <= MAXYEAR]
