"""
Domain models for sitter availability and unavailability.
"""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple, Union

import pendulum
from pendulum import Date

from .exceptions import InvalidDateError, InvalidDayError

WEEKDAYS: Tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DateLike = Union[str, datetime.date]


class AvailabilityMode(str, Enum):
    """Service the weekly schedule is edited for."""
    WALKING = "walking"
    GROOMING = "grooming"


def time_to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    """Convert minutes since midnight back to ``HH:MM``."""
    return f"{total // 60:02d}:{total % 60:02d}"


def format_time_ampm(value: str) -> str:
    """
    Format an ``HH:MM`` string in 12-hour notation, e.g. ``9:00 AM``.

    Values that cannot be parsed are returned unchanged.
    """
    if not value:
        return ""
    try:
        hours, minutes = (int(part) for part in value.split(":"))
    except ValueError:
        return value

    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def normalize_day(day: str) -> str:
    """Return the canonical lowercase weekday name."""
    key = (day or "").strip().lower()
    if key not in WEEKDAYS:
        raise InvalidDayError(
            f"Unknown weekday: '{day}'. Use one of {', '.join(WEEKDAYS)}."
        )
    return key


def to_date(value: DateLike) -> Date:
    """
    Coerce a ``YYYY-MM-DD`` string or any date/datetime into a pendulum Date.

    Dates are compared by calendar value, so freshly constructed values for
    the same day are interchangeable.
    """
    if isinstance(value, datetime.datetime):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, datetime.date):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
        except ValueError as exc:
            raise InvalidDateError(
                f"Invalid date '{value}'. Please use YYYY-MM-DD format."
            ) from exc
    raise InvalidDateError(f"Unsupported date value: {value!r}")


def date_key(value: DateLike) -> str:
    """Return the ``YYYY-MM-DD`` key used by the date-based maps."""
    return to_date(value).to_date_string()


def weekday_of(value: DateLike) -> str:
    """Weekday name for a calendar date."""
    return WEEKDAYS[to_date(value).isoweekday() - 1]


def new_slot_id() -> str:
    """Generate an opaque client-side slot identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TimeSlot:
    """
    A time-of-day interval ``[start, end)``.

    Times are zero-padded ``HH:MM`` strings. Construction does not validate;
    see ``validators.validate_time_slot``.
    """
    id: str
    start: str
    end: str

    @classmethod
    def create(cls, start: str, end: str) -> "TimeSlot":
        """Build a slot with a fresh id."""
        return cls(id=new_slot_id(), start=start, end=end)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimeSlot":
        return cls(
            id=str(data.get("id") or new_slot_id()),
            start=str(data["start"])[:5],
            end=str(data["end"])[:5],
        )

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minutes - self.start_minutes

    def overlaps(self, other: "TimeSlot") -> bool:
        """Check if this slot overlaps with another (half-open ranges)."""
        return (
            self.start_minutes < other.end_minutes
            and self.end_minutes > other.start_minutes
        )

    def with_changes(self, start: str | None = None, end: str | None = None) -> "TimeSlot":
        """Return a copy with the given fields replaced, keeping the id."""
        return replace(
            self,
            start=self.start if start is None else start,
            end=self.end if end is None else end,
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "start": self.start, "end": self.end}

    def format_display(self) -> str:
        """Format the slot for display, e.g. ``9:00 AM - 10:30 AM``."""
        return f"{format_time_ampm(self.start)} - {format_time_ampm(self.end)}"

    def __str__(self) -> str:
        return f"{self.start}–{self.end}"


@dataclass(frozen=True)
class OperatingHours:
    """Window every slot has to fit in."""
    start: str = "08:00"
    end: str = "19:00"


@dataclass
class DayAvailability:
    """Slots offered on one weekday, sorted by start time."""
    day: str
    time_slots: List[TimeSlot] = field(default_factory=list)


@dataclass(frozen=True)
class FullDay:
    """The whole date is unavailable."""

    def to_dict(self) -> Dict[str, Any]:
        return {"full_day": True}


FULL_DAY = FullDay()


@dataclass(frozen=True)
class PartialSlots:
    """Only the given time ranges of the date are unavailable."""
    slots: Tuple[TimeSlot, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"full_day": False, "slots": [slot.to_dict() for slot in self.slots]}


DateUnavailability = Union[FullDay, PartialSlots]


def unavailability_from_dict(data: Any) -> DateUnavailability:
    """
    Parse the serialized form of a date entry.

    Accepts ``{"full_day": true}``, ``{"slots": [...]}`` or a bare list of
    slot dicts. An entry without any slots means the whole date.
    """
    if isinstance(data, (FullDay, PartialSlots)):
        return data
    if isinstance(data, Mapping):
        if data.get("full_day"):
            return FULL_DAY
        data = data.get("slots", [])
    slots = tuple(
        item if isinstance(item, TimeSlot) else TimeSlot.from_dict(item)
        for item in data
    )
    return PartialSlots(slots=slots) if slots else FULL_DAY
