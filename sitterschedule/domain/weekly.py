"""
Recurring weekly availability, keyed by weekday name.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .exceptions import SingleRangeOnlyError, SlotNotFoundError
from .models import (
    WEEKDAYS,
    AvailabilityMode,
    DayAvailability,
    OperatingHours,
    TimeSlot,
    normalize_day,
)
from .validators import merge_slot, sort_time_slots

logger = logging.getLogger(__name__)


class WeeklyAvailability:
    """
    Maps each weekday to an ordered set of non-overlapping time slots.

    Every mutation is validated in full before it is committed; a rejected
    mutation raises and leaves the mapping untouched. In walking mode a day
    holds at most one range.
    """

    def __init__(
        self,
        mode: AvailabilityMode = AvailabilityMode.GROOMING,
        operating_hours: Optional[OperatingHours] = None,
    ):
        self.mode = AvailabilityMode(mode)
        self.operating_hours = operating_hours
        self._days: Dict[str, Tuple[TimeSlot, ...]] = {day: () for day in WEEKDAYS}

    @property
    def single_range_only(self) -> bool:
        return self.mode is AvailabilityMode.WALKING

    def slots_for(self, day: str) -> List[TimeSlot]:
        """Return a copy of the slots for a weekday, sorted by start."""
        return list(self._days[normalize_day(day)])

    def find_slot(self, day: str, slot_id: str) -> TimeSlot:
        for slot in self._days[normalize_day(day)]:
            if slot.id == slot_id:
                return slot
        raise SlotNotFoundError(f"No time slot '{slot_id}' on {normalize_day(day)}.")

    def add_slot(self, day: str, start: str, end: str) -> TimeSlot:
        """
        Add a new slot to a weekday.

        Raises:
            SingleRangeOnlyError: In walking mode when the day already has a slot
            InvalidTimeSlotError: If the times are malformed
            SlotOverlapError: If the slot collides with an existing one
        """
        key = normalize_day(day)
        current = self._days[key]

        if self.single_range_only and current:
            raise SingleRangeOnlyError(
                "You can only have one time range per day for walking."
            )

        slot = TimeSlot.create(start, end)
        self._days[key] = merge_slot(current, slot, self.operating_hours)
        logger.debug("Added %s on %s", slot, key)
        return slot

    def update_slot(
        self,
        day: str,
        slot_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> TimeSlot:
        """
        Change the start and/or end of an existing slot.

        The merged slot is checked against the other slots of the day only.
        """
        key = normalize_day(day)
        updated = self.find_slot(key, slot_id).with_changes(start=start, end=end)
        self._days[key] = merge_slot(self._days[key], updated, self.operating_hours)
        logger.debug("Updated slot %s on %s to %s", slot_id, key, updated)
        return updated

    def remove_slot(self, day: str, slot_id: str) -> bool:
        """Remove a slot. Returns False when no slot had that id."""
        key = normalize_day(day)
        current = self._days[key]
        remaining = tuple(slot for slot in current if slot.id != slot_id)
        self._days[key] = remaining
        return len(remaining) != len(current)

    def replace_all(self, mapping: Mapping[str, Iterable[Any]]) -> None:
        """
        Replace every day with the given slots (used when loading from the store).

        Entries may be ``TimeSlot`` objects or dicts with ``start``/``end``.
        Days missing from the mapping become empty.
        """
        days: Dict[str, Tuple[TimeSlot, ...]] = {day: () for day in WEEKDAYS}
        for day, slots in mapping.items():
            parsed = [
                slot if isinstance(slot, TimeSlot) else TimeSlot.from_dict(slot)
                for slot in slots or []
            ]
            days[normalize_day(day)] = sort_time_slots(parsed)
        self._days = days

    def days(self) -> List[DayAvailability]:
        """All seven days in week order."""
        return [DayAvailability(day=day, time_slots=list(self._days[day])) for day in WEEKDAYS]

    def is_empty(self) -> bool:
        return not any(self._days.values())

    def to_mapping(self) -> Dict[str, List[TimeSlot]]:
        return {day: list(slots) for day, slots in self._days.items()}

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        """Serialize for storage: weekday -> list of slot dicts."""
        return {
            day: [slot.to_dict() for slot in slots]
            for day, slots in self._days.items()
        }
