"""
Transforms that turn the schedule models into calendar markings.

The result maps ``YYYY-MM-DD`` to a ``CalendarMark``; ``to_dict`` produces
the keys the calendar widget understands.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .boarding import BoardingDateSet
from .models import DateLike, date_key, to_date, weekday_of
from .unavailability import DateUnavailabilityMap
from .weekly import WeeklyAvailability

UNAVAILABLE_COLOR = "#f44336"
BOARDING_COLOR = "#62C6B9"
SELECTED_COLOR = "#007AFF"


@dataclass(frozen=True)
class CalendarMark:
    selected: bool = False
    marked: bool = False
    selected_color: Optional[str] = None
    dot_color: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"selected": self.selected}
        if self.marked:
            data["marked"] = True
        if self.selected_color:
            data["selectedColor"] = self.selected_color
        if self.dot_color:
            data["dotColor"] = self.dot_color
        return data


def unavailability_marks(
    unavailability: DateUnavailabilityMap,
    selected_date: Optional[DateLike] = None,
) -> Dict[str, CalendarMark]:
    """
    Mark every date that has unavailability in red.

    The focused date is always shown as selected; it keeps the red colour
    when it is unavailable and is blue otherwise.
    """
    marks = {
        key: CalendarMark(
            selected=True,
            marked=True,
            selected_color=UNAVAILABLE_COLOR,
            dot_color=UNAVAILABLE_COLOR,
        )
        for key in unavailability.dates()
    }

    if selected_date is not None:
        key = date_key(selected_date)
        existing = marks.get(key)
        if existing is None:
            marks[key] = CalendarMark(selected=True, selected_color=SELECTED_COLOR)

    return marks


def boarding_marks(boarding: BoardingDateSet) -> Dict[str, CalendarMark]:
    """Mark every selected boarding date."""
    return {
        key: CalendarMark(selected=True, selected_color=BOARDING_COLOR)
        for key in boarding.to_list()
    }


def weekly_marks(
    weekly: WeeklyAvailability,
    start: DateLike,
    end: DateLike,
) -> Dict[str, CalendarMark]:
    """Dot every date in ``[start, end]`` whose weekday has availability."""
    marks: Dict[str, CalendarMark] = {}
    current = to_date(start)
    last = to_date(end)

    while current <= last:
        if weekly.slots_for(weekday_of(current)):
            marks[current.to_date_string()] = CalendarMark(
                marked=True, dot_color=BOARDING_COLOR
            )
        current = current.add(days=1)

    return marks
