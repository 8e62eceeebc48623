"""
Application service for editing a sitter's schedule.

The service loads the schedule from a store adapter into an in-memory
``ScheduleSession``, lets callers mutate it through the domain aggregators
and writes the whole session back on an explicit save. The store dependency
is a simple protocol so tests can plug in a stub.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from pendulum import Date

from ..domain.boarding import BoardingDateSet
from ..domain.booking_calculator import BookingCalculator
from ..domain.exceptions import RemoteStoreError, SaveInProgressError
from ..domain.models import (
    AvailabilityMode,
    DateLike,
    DateUnavailability,
    OperatingHours,
    TimeSlot,
    to_date,
)
from ..domain.unavailability import DateUnavailabilityMap
from ..domain.weekly import WeeklyAvailability

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    """Outcome of a bulk write to the store."""
    success: bool
    error: Optional[str] = None


class ScheduleStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the service."""

    def fetch_availability(self, user_id: str) -> Dict[str, List[TimeSlot]]:
        """Return weekly slots per weekday."""

    def fetch_unavailability(self, user_id: str) -> Dict[str, DateUnavailability]:
        """Return unavailability per ``YYYY-MM-DD`` date."""

    def fetch_boarding_dates(self, user_id: str) -> List[Date]:
        """Return upcoming boarding dates."""

    def save_availability(self, user_id: str, mapping: Mapping[str, Iterable[TimeSlot]]) -> SaveResult:
        """Persist the weekly availability."""

    def save_unavailability(self, user_id: str, mapping: Mapping[str, DateUnavailability]) -> bool:
        """Persist the date-based unavailability."""

    def save_boarding_dates(self, user_id: str, dates: Iterable[DateLike]) -> SaveResult:
        """Persist the boarding dates."""

    def check_day_has_unavailability(self, user_id: str, date: DateLike) -> bool:
        """Return True when the stored schedule blocks the date."""


@dataclass
class ScheduleSession:
    """View-model of one sitter's schedule, rebuilt on every load."""
    user_id: str
    weekly: WeeklyAvailability
    unavailability: DateUnavailabilityMap
    boarding: BoardingDateSet = field(default_factory=BoardingDateSet)


@dataclass(frozen=True)
class _BlockedDates:
    """Unavailability check combining the session with the store's answer."""
    local: DateUnavailabilityMap
    blocked_remotely: bool

    def is_date_blocked(self, date: DateLike) -> bool:
        return self.blocked_remotely or self.local.is_date_blocked(date)


class ScheduleService:
    """
    Orchestrates loading, editing and saving a sitter schedule.

    Only one save may run at a time per service; a second request while one
    is in flight is rejected rather than queued.
    """

    def __init__(
        self,
        store: ScheduleStoreProtocol,
        mode: AvailabilityMode = AvailabilityMode.WALKING,
        operating_hours: Optional[OperatingHours] = None,
        today: Optional[Callable[[], Date]] = None,
    ) -> None:
        self._store = store
        self._mode = mode
        self._operating_hours = operating_hours
        self._today = today
        self._saving = False

    @property
    def is_saving(self) -> bool:
        return self._saving

    def new_session(self, user_id: str) -> ScheduleSession:
        """Create an empty session using the service settings."""
        return ScheduleSession(
            user_id=user_id,
            weekly=WeeklyAvailability(mode=self._mode, operating_hours=self._operating_hours),
            unavailability=DateUnavailabilityMap(
                operating_hours=self._operating_hours,
                today=self._today() if self._today else None,
            ),
        )

    async def load(self, user_id: str) -> ScheduleSession:
        """
        Fetch the stored schedule and build a fresh session from it.

        Raises:
            RemoteStoreError: If the store cannot be read
        """
        session = self.new_session(user_id)

        availability = await asyncio.to_thread(self._store.fetch_availability, user_id)
        unavailability = await asyncio.to_thread(self._store.fetch_unavailability, user_id)
        boarding = await asyncio.to_thread(self._store.fetch_boarding_dates, user_id)

        session.weekly.replace_all(availability)
        session.unavailability.replace_all(unavailability)
        session.boarding.replace_all(boarding)

        logger.info(
            "Loaded schedule for %s: %d unavailable dates, %d boarding dates",
            user_id,
            len(session.unavailability),
            len(session.boarding),
        )
        return session

    async def toggle_boarding_date(self, session: ScheduleSession, date: DateLike) -> bool:
        """
        Select or deselect a boarding date.

        Before a new date is admitted the store is asked as well, so dates
        blocked by data saved elsewhere are rejected too.

        Raises:
            DateUnavailableError: If the date is blocked
        """
        day = to_date(date)
        blocked_remotely = False

        if not session.boarding.contains(day) and not session.unavailability.is_date_blocked(day):
            blocked_remotely = await asyncio.to_thread(
                self._store.check_day_has_unavailability, session.user_id, day
            )

        return session.boarding.toggle_boarding_date(
            day, _BlockedDates(local=session.unavailability, blocked_remotely=blocked_remotely)
        )

    def bookable_slots(self, session: ScheduleSession, date: DateLike) -> List[TimeSlot]:
        """Weekly slots of the date minus its unavailability."""
        return BookingCalculator(session.weekly, session.unavailability).bookable_slots(date)

    async def save(self, session: ScheduleSession) -> None:
        """
        Write the whole session to the store.

        The session is never rolled back; after a failure the user can simply
        save again.

        Raises:
            SaveInProgressError: If another save is still running
            RemoteStoreError: If any part could not be written
        """
        if self._saving:
            raise SaveInProgressError("A save is already in progress.")

        self._saving = True
        try:
            availability = await asyncio.to_thread(
                self._store.save_availability, session.user_id, session.weekly.to_mapping()
            )
            unavailability_saved = await asyncio.to_thread(
                self._store.save_unavailability,
                session.user_id,
                session.unavailability.to_mapping(),
            )
            boarding = await asyncio.to_thread(
                self._store.save_boarding_dates, session.user_id, session.boarding.sorted_dates()
            )
        finally:
            self._saving = False

        failures: List[str] = []
        if not availability.success:
            failures.append(f"availability ({availability.error or 'unknown error'})")
        if not unavailability_saved:
            failures.append("unavailability")
        if not boarding.success:
            failures.append(f"boarding dates ({boarding.error or 'unknown error'})")

        if failures:
            raise RemoteStoreError(
                "Failed to save your schedule. Please try again. "
                f"Could not save: {', '.join(failures)}"
            )

        logger.info("Saved schedule for %s", session.user_id)
