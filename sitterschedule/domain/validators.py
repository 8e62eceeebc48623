"""
Validation rules shared by the weekly and the date-based aggregators.

Both aggregators go through ``merge_slot`` so overlap semantics (half-open
ranges, self-exclusion by id) are identical everywhere.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .exceptions import InvalidTimeSlotError, SlotOverlapError
from .models import OperatingHours, TimeSlot, format_time_ampm, time_to_minutes

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True)
class SlotOverlap:
    """Details about the existing slot a candidate collides with."""
    candidate: TimeSlot
    overlapping_with: TimeSlot

    def to_error(self) -> SlotOverlapError:
        return SlotOverlapError(self.candidate, self.overlapping_with)


def _parse_time(value: str) -> Optional[Tuple[int, int]]:
    match = _TIME_PATTERN.fullmatch(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def validate_time_slot(
    slot: TimeSlot,
    operating_hours: Optional[OperatingHours] = None,
) -> Optional[InvalidTimeSlotError]:
    """
    Validate a single slot.

    Returns the error describing the first problem found, or None when the
    slot is valid. Nothing is raised here so callers can decide how to
    surface the message.
    """
    if not slot.start or not slot.end:
        return InvalidTimeSlotError("Start and end times are required.")

    start = _parse_time(slot.start)
    end = _parse_time(slot.end)
    if start is None or end is None:
        return InvalidTimeSlotError("Invalid time format. Please use HH:MM format.")

    start_hours, start_minutes = start
    end_hours, end_minutes = end

    if not (0 <= start_hours <= 23 and 0 <= start_minutes <= 59):
        return InvalidTimeSlotError(
            "Start time is invalid. Hours must be 0-23 and minutes 0-59."
        )
    if not (0 <= end_hours <= 23 and 0 <= end_minutes <= 59):
        return InvalidTimeSlotError(
            "End time is invalid. Hours must be 0-23 and minutes 0-59."
        )

    start_total = start_hours * 60 + start_minutes
    end_total = end_hours * 60 + end_minutes

    if start_total >= end_total:
        return InvalidTimeSlotError("End time must be later than start time.")

    if operating_hours is not None:
        if start_total < time_to_minutes(operating_hours.start):
            return InvalidTimeSlotError(
                f"Start time cannot be earlier than {format_time_ampm(operating_hours.start)}."
            )
        if end_total > time_to_minutes(operating_hours.end):
            return InvalidTimeSlotError(
                f"End time cannot be later than {format_time_ampm(operating_hours.end)}."
            )

    return None


def check_overlap(
    existing_slots: Iterable[TimeSlot],
    candidate: TimeSlot,
) -> Optional[SlotOverlap]:
    """
    Find the first existing slot the candidate overlaps with.

    A slot sharing the candidate's id is the slot being edited and is
    skipped. Adjacent slots (one ends where the other starts) do not overlap.
    """
    for slot in existing_slots:
        if slot.id == candidate.id:
            continue
        if candidate.overlaps(slot):
            return SlotOverlap(candidate=candidate, overlapping_with=slot)
    return None


def sort_time_slots(slots: Iterable[TimeSlot]) -> Tuple[TimeSlot, ...]:
    """Sort slots by start time."""
    return tuple(sorted(slots, key=lambda s: time_to_minutes(s.start)))


def merge_slot(
    slots: Iterable[TimeSlot],
    candidate: TimeSlot,
    operating_hours: Optional[OperatingHours] = None,
) -> Tuple[TimeSlot, ...]:
    """
    Validate a candidate against a collection and return the new collection.

    The candidate replaces the slot with the same id, or is appended when no
    such slot exists. The result is sorted by start. The input is never
    modified, so a raised error leaves the caller's state as it was.

    Raises:
        InvalidTimeSlotError: If the candidate itself is malformed
        SlotOverlapError: If the candidate collides with another slot
    """
    current = tuple(slots)

    error = validate_time_slot(candidate, operating_hours)
    if error is not None:
        raise error

    overlap = check_overlap(current, candidate)
    if overlap is not None:
        raise overlap.to_error()

    others = [slot for slot in current if slot.id != candidate.id]
    return sort_time_slots([*others, candidate])
