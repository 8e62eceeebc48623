"""
Tests for BookingCalculator.
"""

import pytest

from sitterschedule.domain.booking_calculator import BookingCalculator
from sitterschedule.domain.models import TimeSlot
from sitterschedule.domain.unavailability import DateUnavailabilityMap
from sitterschedule.domain.weekly import WeeklyAvailability

MONDAY = "2024-11-25"
TUESDAY = "2024-11-26"


@pytest.fixture
def weekly():
    weekly = WeeklyAvailability()
    weekly.replace_all(
        {
            "monday": [
                TimeSlot(id="m1", start="09:00", end="17:00"),
                TimeSlot(id="m2", start="18:00", end="19:00"),
            ],
        }
    )
    return weekly


@pytest.fixture
def unavailability():
    return DateUnavailabilityMap()


class TestBookableSlots:
    """Tests for bookable_slots."""

    def test_without_unavailability_returns_weekly_slots(self, weekly, unavailability):
        """Test that a free date offers the weekly slots unchanged."""
        calculator = BookingCalculator(weekly, unavailability)

        assert [s.id for s in calculator.bookable_slots(MONDAY)] == ["m1", "m2"]
        assert calculator.bookable_slots(TUESDAY) == []

    def test_full_day_removes_everything(self, weekly, unavailability):
        """Test that a whole-day mark leaves nothing bookable."""
        unavailability.toggle_date_unavailable(MONDAY)

        assert BookingCalculator(weekly, unavailability).bookable_slots(MONDAY) == []

    def test_partial_unavailability_is_subtracted(self, weekly, unavailability):
        """Test that unavailable ranges are cut out of the weekly slots."""
        unavailability.add_slot(MONDAY, "10:00", "11:00")
        unavailability.add_slot(MONDAY, "14:00", "15:00")

        slots = BookingCalculator(weekly, unavailability).bookable_slots(MONDAY)

        assert [(s.start, s.end) for s in slots] == [
            ("09:00", "10:00"),
            ("11:00", "14:00"),
            ("15:00", "17:00"),
            ("18:00", "19:00"),
        ]
        assert slots[0].id == "m1"
        assert slots[1].id not in ("m1", "m2")
        assert slots[3].id == "m2"

    def test_busy_range_covering_slot_edges(self, weekly, unavailability):
        """Test ranges that stick out over the edges of a slot."""
        unavailability.add_slot(MONDAY, "08:00", "09:30")
        unavailability.add_slot(MONDAY, "16:30", "18:30")

        slots = BookingCalculator(weekly, unavailability).bookable_slots(MONDAY)

        assert [(s.start, s.end) for s in slots] == [("09:30", "16:30"), ("18:30", "19:00")]

    def test_is_bookable(self, weekly, unavailability):
        """Test whether a requested range fits into a bookable slot."""
        unavailability.add_slot(MONDAY, "12:00", "13:00")
        calculator = BookingCalculator(weekly, unavailability)

        assert calculator.is_bookable(MONDAY, "09:00", "12:00")
        assert not calculator.is_bookable(MONDAY, "11:30", "12:30")
        assert not calculator.is_bookable(MONDAY, "17:00", "18:00")
        assert not calculator.is_bookable(MONDAY, "10:00", "10:00")
        assert not calculator.is_bookable(TUESDAY, "10:00", "11:00")
