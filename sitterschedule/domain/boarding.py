"""
Calendar dates a sitter offers overnight boarding on.
"""

import logging
from typing import Iterable, Iterator, List, Protocol, Set

from pendulum import Date

from .exceptions import DateUnavailableError
from .models import DateLike, to_date

logger = logging.getLogger(__name__)


class UnavailabilityCheck(Protocol):
    """Anything that can tell whether a date is blocked by unavailability."""

    def is_date_blocked(self, date: DateLike) -> bool:
        """Return True when the date must not be offered."""


class BoardingDateSet:
    """
    Set of boarding dates, compared by calendar value.

    Adding a date is cross-checked against the unavailability model; removing
    is always allowed.
    """

    def __init__(self, dates: Iterable[DateLike] = ()):
        self._dates: Set[Date] = {to_date(value) for value in dates}

    def contains(self, date: DateLike) -> bool:
        return to_date(date) in self._dates

    def toggle_boarding_date(self, date: DateLike, unavailability: UnavailabilityCheck) -> bool:
        """
        Select or deselect a boarding date.

        Returns True when the date is selected afterwards.

        Raises:
            DateUnavailableError: If the date is not selected yet and the
                unavailability check reports it as blocked
        """
        day = to_date(date)

        if day in self._dates:
            self._dates.remove(day)
            logger.debug("Removed boarding date %s", day)
            return False

        if unavailability.is_date_blocked(day):
            raise DateUnavailableError(day.to_date_string())

        self._dates.add(day)
        logger.debug("Added boarding date %s", day)
        return True

    def replace_all(self, dates: Iterable[DateLike]) -> None:
        self._dates = {to_date(value) for value in dates}

    def sorted_dates(self) -> List[Date]:
        return sorted(self._dates)

    def to_list(self) -> List[str]:
        """Selected dates as sorted ``YYYY-MM-DD`` strings."""
        return [day.to_date_string() for day in self.sorted_dates()]

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[Date]:
        return iter(self.sorted_dates())
