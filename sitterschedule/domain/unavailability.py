"""
One-off unavailability, keyed by calendar date.

Each date holds either ``FullDay`` or ``PartialSlots``. A date without any
unavailability has no entry at all.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pendulum import Date

from .exceptions import DateFullyUnavailableError, PastDateError, SlotNotFoundError
from .models import (
    FULL_DAY,
    DateLike,
    DateUnavailability,
    FullDay,
    OperatingHours,
    PartialSlots,
    TimeSlot,
    date_key,
    to_date,
    unavailability_from_dict,
)
from .validators import merge_slot, sort_time_slots

logger = logging.getLogger(__name__)


class DateUnavailabilityMap:
    """
    Mutable map of date string -> ``DateUnavailability``.

    When ``today`` is given, dates before it cannot be marked.
    """

    def __init__(
        self,
        operating_hours: Optional[OperatingHours] = None,
        today: Optional[DateLike] = None,
    ):
        self.operating_hours = operating_hours
        self.today: Optional[Date] = to_date(today) if today is not None else None
        self._dates: Dict[str, DateUnavailability] = {}
        # Partial ranges hidden by a whole-day mark, restored when it is cleared
        self._covered: Dict[str, PartialSlots] = {}

    def _check_not_past(self, key: str) -> None:
        if self.today is not None and key < self.today.to_date_string():
            raise PastDateError("Cannot set unavailability for past dates.")

    def get(self, date: DateLike) -> Optional[DateUnavailability]:
        return self._dates.get(date_key(date))

    def is_fully_unavailable(self, date: DateLike) -> bool:
        return isinstance(self.get(date), FullDay)

    def is_date_blocked(self, date: DateLike) -> bool:
        """True when the date carries any unavailability at all."""
        return date_key(date) in self._dates

    def slots_for(self, date: DateLike) -> List[TimeSlot]:
        entry = self.get(date)
        if isinstance(entry, PartialSlots):
            return list(entry.slots)
        return []

    def dates(self) -> List[str]:
        return sorted(self._dates)

    def toggle_date_unavailable(self, date: DateLike) -> bool:
        """
        Flip the whole-day flag of a date.

        A date that is fully unavailable becomes available again. Any other
        date becomes fully unavailable. Partial ranges the whole-day mark
        covers come back when the mark is cleared, so two toggles in a row
        leave the date as it was. Returns True when the date ends up fully
        unavailable.
        """
        key = date_key(date)
        if isinstance(self._dates.get(key), FullDay):
            covered = self._covered.pop(key, None)
            if covered is not None:
                self._dates[key] = covered
            else:
                del self._dates[key]
            logger.debug("Cleared full-day unavailability on %s", key)
            return False

        self._check_not_past(key)
        entry = self._dates.get(key)
        if isinstance(entry, PartialSlots):
            self._covered[key] = entry
        self._dates[key] = FULL_DAY
        logger.debug("Marked %s unavailable all day", key)
        return True

    def _partial_slots(self, key: str):
        entry = self._dates.get(key)
        if isinstance(entry, FullDay):
            raise DateFullyUnavailableError(
                f"{key} is already unavailable for the whole day."
            )
        return entry.slots if entry is not None else ()

    def add_slot(self, date: DateLike, start: str, end: str) -> TimeSlot:
        """Mark a time range of a date as unavailable."""
        key = date_key(date)
        self._check_not_past(key)
        current = self._partial_slots(key)

        slot = TimeSlot.create(start, end)
        self._dates[key] = PartialSlots(
            slots=merge_slot(current, slot, self.operating_hours)
        )
        return slot

    def update_slot(
        self,
        date: DateLike,
        slot_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> TimeSlot:
        """Change an unavailable range; checked against the date's other slots."""
        key = date_key(date)
        current = self._partial_slots(key)

        original = next((slot for slot in current if slot.id == slot_id), None)
        if original is None:
            raise SlotNotFoundError(f"No time slot '{slot_id}' on {key}.")

        updated = original.with_changes(start=start, end=end)
        self._dates[key] = PartialSlots(
            slots=merge_slot(current, updated, self.operating_hours)
        )
        return updated

    def remove_slot(self, date: DateLike, slot_id: str) -> bool:
        """
        Remove an unavailable range.

        When the last range of a date goes, the date entry goes with it.
        """
        key = date_key(date)
        entry = self._dates.get(key)
        if not isinstance(entry, PartialSlots):
            return False

        remaining = tuple(slot for slot in entry.slots if slot.id != slot_id)
        if not remaining:
            del self._dates[key]
        else:
            self._dates[key] = PartialSlots(slots=remaining)
        return len(remaining) != len(entry.slots)

    def replace_all(self, mapping: Mapping[str, Any]) -> None:
        """Replace the whole map with entries loaded from the store."""
        dates: Dict[str, DateUnavailability] = {}
        for date, value in mapping.items():
            entry = unavailability_from_dict(value)
            if isinstance(entry, PartialSlots):
                entry = PartialSlots(slots=sort_time_slots(entry.slots))
            dates[date_key(date)] = entry
        self._dates = dates
        self._covered = {}

    def to_mapping(self) -> Dict[str, DateUnavailability]:
        return dict(self._dates)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key: self._dates[key].to_dict() for key in sorted(self._dates)}

    def __len__(self) -> int:
        return len(self._dates)
