"""
Merges the weekly availability with date-based unavailability.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O).
"""

from typing import List

from .models import (
    DateLike,
    FullDay,
    PartialSlots,
    TimeSlot,
    minutes_to_time,
    time_to_minutes,
    weekday_of,
)
from .unavailability import DateUnavailabilityMap
from .validators import sort_time_slots
from .weekly import WeeklyAvailability


class BookingCalculator:
    """
    Calculates the bookable time on a specific date.

    Algorithm:
    1. Take the weekly slots for the date's weekday
    2. Drop everything when the date is unavailable all day
    3. Otherwise subtract the date's unavailable ranges from each slot
    """

    def __init__(self, weekly: WeeklyAvailability, unavailability: DateUnavailabilityMap):
        self.weekly = weekly
        self.unavailability = unavailability

    def bookable_slots(self, date: DateLike) -> List[TimeSlot]:
        """
        Return the free ranges of a date, sorted by start.

        Slots that are cut by unavailability keep their id on the first
        remaining piece; further pieces get fresh ids.
        """
        weekly_slots = self.weekly.slots_for(weekday_of(date))
        entry = self.unavailability.get(date)

        if isinstance(entry, FullDay):
            return []
        if not isinstance(entry, PartialSlots):
            return weekly_slots

        free: List[TimeSlot] = []
        for slot in weekly_slots:
            free.extend(self._subtract_busy_from_slot(slot, list(entry.slots)))
        return list(sort_time_slots(free))

    def is_bookable(self, date: DateLike, start: str, end: str) -> bool:
        """True when ``[start, end)`` fits inside one bookable range."""
        start_total = time_to_minutes(start)
        end_total = time_to_minutes(end)
        if start_total >= end_total:
            return False

        return any(
            slot.start_minutes <= start_total and end_total <= slot.end_minutes
            for slot in self.bookable_slots(date)
        )

    def _subtract_busy_from_slot(
        self,
        slot: TimeSlot,
        busy_slots: List[TimeSlot],
    ) -> List[TimeSlot]:
        """
        Subtract busy ranges from a slot, yielding the free pieces.

        Example:
        Slot: 09:00 - 17:00
        Busy: [10:00-11:00, 14:00-15:00]
        Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
        """
        pieces: List[TimeSlot] = []
        current_start = slot.start_minutes

        for busy in sort_time_slots(busy_slots):
            if not slot.overlaps(busy):
                continue

            clipped_busy_start = max(busy.start_minutes, slot.start_minutes)
            clipped_busy_end = min(busy.end_minutes, slot.end_minutes)

            if current_start < clipped_busy_start:
                pieces.append(self._piece(slot, pieces, current_start, clipped_busy_start))

            current_start = max(current_start, clipped_busy_end)

        if current_start < slot.end_minutes:
            pieces.append(self._piece(slot, pieces, current_start, slot.end_minutes))

        return pieces

    @staticmethod
    def _piece(slot: TimeSlot, pieces: List[TimeSlot], start: int, end: int) -> TimeSlot:
        if not pieces:
            return slot.with_changes(start=minutes_to_time(start), end=minutes_to_time(end))
        return TimeSlot.create(minutes_to_time(start), minutes_to_time(end))
