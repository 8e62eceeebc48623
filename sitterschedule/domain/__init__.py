"""
Domain layer - Pure business logic without external dependencies.
"""

from .boarding import BoardingDateSet
from .booking_calculator import BookingCalculator
from .models import (
    FULL_DAY,
    AvailabilityMode,
    DayAvailability,
    FullDay,
    OperatingHours,
    PartialSlots,
    TimeSlot,
)
from .unavailability import DateUnavailabilityMap
from .validators import check_overlap, validate_time_slot
from .weekly import WeeklyAvailability

__all__ = [
    "FULL_DAY",
    "AvailabilityMode",
    "BoardingDateSet",
    "BookingCalculator",
    "DateUnavailabilityMap",
    "DayAvailability",
    "FullDay",
    "OperatingHours",
    "PartialSlots",
    "TimeSlot",
    "WeeklyAvailability",
    "check_overlap",
    "validate_time_slot",
]
