"""
Domain-specific exception hierarchy for sitter schedule management.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TimeSlot


class SitterScheduleError(Exception):
    """Base class for all application-level errors."""


class ScheduleValidationError(SitterScheduleError):
    """Raised when user input is malformed."""


class InvalidTimeSlotError(ScheduleValidationError):
    """Raised when a time slot has a bad format or an empty range."""


class InvalidDateError(ScheduleValidationError):
    """Raised when a calendar date cannot be parsed."""


class PastDateError(InvalidDateError):
    """Raised when unavailability is set for a date that already passed."""


class InvalidDayError(ScheduleValidationError):
    """Raised when a weekday name is not recognised."""


class SlotOverlapError(SitterScheduleError):
    """Raised when a slot would overlap an existing slot."""

    def __init__(self, candidate: "TimeSlot", overlapping_with: "TimeSlot"):
        self.candidate = candidate
        self.overlapping_with = overlapping_with
        super().__init__(
            f"This time slot overlaps with an existing slot: {overlapping_with}"
        )


class SingleRangeOnlyError(SitterScheduleError):
    """Raised when a second range is added to a single-range day."""


class DateFullyUnavailableError(SitterScheduleError):
    """Raised when a slot is added to a date that is unavailable all day."""


class DateUnavailableError(SitterScheduleError):
    """Raised when a boarding date collides with an unavailable date."""

    def __init__(self, date: str):
        self.date = date
        super().__init__(
            f"{date} is marked as unavailable in your calendar. "
            "Please select a different date."
        )


class SlotNotFoundError(SitterScheduleError):
    """Raised when a slot id does not exist in the collection."""


class RemoteStoreError(SitterScheduleError):
    """Raised when schedule data cannot be fetched from or saved to the store."""


class SaveInProgressError(SitterScheduleError):
    """Raised when a save is requested while another save is still running."""
