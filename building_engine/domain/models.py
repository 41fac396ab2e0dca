"""Domain models for booking, recurrence, calendar and asset lifecycle computations.

All values are immutable. Records arriving from the data-access layer are
converted with the ``from_record`` constructors, which tolerate incomplete
rows the same way the calendar and forecast views do: bad dates become
``None`` and unusable rows become ``None`` as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from building_engine.utils.dates import parse_date
from building_engine.utils.logger import get_logger, log_degraded_record


logger = get_logger(__name__)


MINUTES_PER_DAY = 24 * 60


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_flag(value: Any) -> bool:
    """Interpret a stored yes/no field; anything unrecognised is ``False``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return False


def parse_decimal(value: Any) -> Decimal:
    """Parse a currency-like amount, treating missing or bad values as zero.

    Non-finite amounts (``NaN``, ``Infinity``) also collapse to zero.
    """
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        log_degraded_record(logger, "amount", "unparseable", value=value)
        return Decimal("0")
    if not result.is_finite():
        log_degraded_record(logger, "amount", "non-finite", value=value)
        return Decimal("0")
    return result


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Wall-clock time without a date."""

    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError("hour must be between 0 and 23")
        if not 0 <= self.minute <= 59:
            raise ValueError("minute must be between 0 and 59")

    @classmethod
    def from_string(cls, value: str) -> TimeOfDay:
        """Parse ``HH:MM`` (seconds, if present, are ignored)."""
        parts = value.strip().split(":")
        if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
            raise ValueError(f"time '{value}' must follow HH:MM format")
        return cls(hour=int(parts[0]), minute=int(parts[1]))

    @classmethod
    def from_minutes(cls, total_minutes: int) -> TimeOfDay:
        if not 0 <= total_minutes < MINUTES_PER_DAY:
            raise ValueError("minutes since midnight must fall within a single day")
        hour, minute = divmod(total_minutes, 60)
        return cls(hour=hour, minute=minute)

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute

    def add_minutes(self, minutes: int) -> TimeOfDay:
        return TimeOfDay.from_minutes(self.total_minutes + minutes)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_time_of_day(value: Any) -> Optional[TimeOfDay]:
    if isinstance(value, TimeOfDay):
        return value
    if not isinstance(value, str):
        return None
    try:
        return TimeOfDay.from_string(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Slot:
    """Half-open interval ``[start, end)`` on an implicit date."""

    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("slot start must be earlier than slot end")

    @property
    def duration_minutes(self) -> int:
        return self.end.total_minutes - self.start.total_minutes

    def overlaps(self, start: TimeOfDay, end: TimeOfDay) -> bool:
        return self.start < end and start < self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": str(self.start), "end": str(self.end)}


class ReservationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        """Whether a booking in this status still holds its slot."""
        if self is ReservationStatus.PENDING or self is ReservationStatus.APPROVED:
            return True
        if self is ReservationStatus.REJECTED or self is ReservationStatus.CANCELLED:
            return False
        raise AssertionError(f"unhandled reservation status {self!r}")


@dataclass(frozen=True)
class Reservation:
    booking_date: date
    start: TimeOfDay
    end: TimeOfDay
    status: ReservationStatus = ReservationStatus.PENDING
    reservation_id: Optional[str] = None
    amenity_id: Optional[str] = None
    guests: int = 0

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("reservation start must be earlier than reservation end")

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional[Reservation]:
        booking_date = parse_date(record.get("booking_date"))
        start = parse_time_of_day(record.get("start_time"))
        end = parse_time_of_day(record.get("end_time"))
        try:
            status = ReservationStatus(str(record.get("status") or "pending").strip().lower())
        except ValueError:
            return None
        if booking_date is None or start is None or end is None or start >= end:
            return None
        return cls(
            booking_date=booking_date,
            start=start,
            end=end,
            status=status,
            reservation_id=_optional_str(record.get("id")),
            amenity_id=_optional_str(record.get("amenity_id")),
            guests=_optional_int(record.get("guests")) or 0,
        )


class AmenityStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class Amenity:
    amenity_id: str
    name: str
    available_from: Optional[TimeOfDay] = None
    available_to: Optional[TimeOfDay] = None
    slot_duration_hours: Optional[float] = None
    capacity: Optional[int] = None
    booking_fee: Decimal = Decimal("0")
    status: AmenityStatus = AmenityStatus.AVAILABLE

    @property
    def requires_payment(self) -> bool:
        return self.booking_fee > 0


class RecurrencePeriod(str, Enum):
    ONE_TIME = "one_time"
    MONTHLY = "monthly"
    BI_MONTHLY = "bi_monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    YEARLY = "yearly"

    @classmethod
    def from_keyword(cls, value: Any) -> Optional[RecurrencePeriod]:
        """Map a stored keyword to a period; ``none`` is the legacy one-time value."""
        if value is None:
            return cls.ONE_TIME
        keyword = str(value).strip().lower()
        if keyword in ("", "none"):
            return cls.ONE_TIME
        try:
            return cls(keyword)
        except ValueError:
            return None


@dataclass(frozen=True)
class RecurrenceRule:
    """Periodic pattern anchored on ``start_date``.

    ``start_date`` is optional only so that a row with an unparseable anchor
    can still be represented; such a rule never occurs.
    """

    start_date: Optional[date]
    period: RecurrencePeriod = RecurrencePeriod.ONE_TIME
    end_date: Optional[date] = None
    never_expires: bool = False
    rule_id: Optional[str] = None
    title: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional[RecurrenceRule]:
        period = RecurrencePeriod.from_keyword(record.get("recurrence"))
        if period is None:
            return None
        return cls(
            start_date=parse_date(record.get("scheduled_date") or record.get("start_date")),
            period=period,
            end_date=parse_date(record.get("recurrence_end_date") or record.get("end_date")),
            never_expires=_parse_flag(record.get("never_expires")),
            rule_id=_optional_str(record.get("id")),
            title=str(record.get("title") or ""),
        )


@dataclass(frozen=True)
class AssetRecord:
    asset_id: str
    name: str
    install_date: Optional[date] = None
    lifespan_years: Optional[int] = None
    replacement_cost: Decimal = Decimal("0")
    category: str = ""
    risk_rating: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> AssetRecord:
        return cls(
            asset_id=str(record.get("id") or ""),
            name=str(record.get("name") or ""),
            install_date=parse_date(record.get("installation_date")),
            lifespan_years=_optional_int(record.get("lifecycle_years")),
            replacement_cost=parse_decimal(record.get("replacement_cost")),
            category=str(record.get("asset_main_category") or ""),
            risk_rating=_optional_str(record.get("risk_rating")),
        )


@dataclass(frozen=True)
class CalendarEvent:
    event_id: str
    title: str
    event_date: Optional[date]

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CalendarEvent:
        return cls(
            event_id=str(record.get("id") or ""),
            title=str(record.get("title") or ""),
            event_date=parse_date(record.get("event_date") or record.get("date")),
        )


@dataclass(frozen=True)
class WorkItem:
    item_id: str
    title: str
    created_date: Optional[date] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    @property
    def dates(self) -> tuple[date, ...]:
        return tuple(
            value
            for value in (self.created_date, self.start_date, self.due_date)
            if value is not None
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> WorkItem:
        return cls(
            item_id=str(record.get("id") or ""),
            title=str(record.get("title") or ""),
            created_date=parse_date(record.get("created_date")),
            start_date=parse_date(record.get("start_date")),
            due_date=parse_date(record.get("due_date")),
        )


@dataclass(frozen=True)
class ResidentMove:
    resident_id: str
    name: str
    move_in_date: Optional[date] = None
    move_out_date: Optional[date] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ResidentMove:
        return cls(
            resident_id=str(record.get("id") or ""),
            name=str(record.get("full_name") or record.get("name") or ""),
            move_in_date=parse_date(record.get("move_in_date")),
            move_out_date=parse_date(record.get("move_out_date")),
        )
