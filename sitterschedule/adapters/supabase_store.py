"""
Supabase (PostgREST) store for sitter schedules.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pendulum
import requests
from pendulum import Date

from ..config import SupabaseConfig
from ..domain.exceptions import InvalidDateError, RemoteStoreError
from ..domain.models import (
    FULL_DAY,
    WEEKDAYS,
    DateLike,
    DateUnavailability,
    FullDay,
    PartialSlots,
    TimeSlot,
    date_key,
    to_date,
)
from ..services.schedule_service import SaveResult

logger = logging.getLogger(__name__)


@dataclass
class SlotChanges:
    """Result of comparing stored slots with edited slots by id."""
    added: List[TimeSlot] = field(default_factory=list)
    modified: List[TimeSlot] = field(default_factory=list)
    unchanged: List[TimeSlot] = field(default_factory=list)
    removed: List[TimeSlot] = field(default_factory=list)


def diff_time_slots(original: Iterable[TimeSlot], updated: Iterable[TimeSlot]) -> SlotChanges:
    """
    Work out which slots were added, modified, kept or removed.

    Slots are matched by id; a slot with the same id but different times
    counts as modified.
    """
    original_by_id = {slot.id: slot for slot in original}
    updated_list = list(updated)
    updated_ids = {slot.id for slot in updated_list}
    changes = SlotChanges()

    for slot in updated_list:
        stored = original_by_id.get(slot.id)
        if stored is None:
            changes.added.append(slot)
        elif (stored.start, stored.end) != (slot.start, slot.end):
            changes.modified.append(slot)
        else:
            changes.unchanged.append(slot)

    changes.removed = [slot for slot_id, slot in original_by_id.items() if slot_id not in updated_ids]
    return changes


class SupabaseStore:
    """
    Reads and writes schedule data through the Supabase REST API.

    Tables:
    - ``sitter_weekly_availability`` (weekday 1 = Monday .. 7 = Sunday)
    - ``sitter_unavailability`` (rows without times are full days)
    - ``boarding_availability``
    """

    WEEKLY_TABLE = "sitter_weekly_availability"
    UNAVAILABILITY_TABLE = "sitter_unavailability"
    BOARDING_TABLE = "boarding_availability"
    INSERT_WEEKLY_RPC = "insert_sitter_weekly_availability"

    def __init__(self, config: SupabaseConfig, timezone: str = "UTC", timeout: int = 30):
        """
        Initialize the store.

        Args:
            config: Supabase connection settings
            timezone: Timezone used to decide which boarding dates are in the past
            timeout: Per-request timeout in seconds
        """
        self.base_url = config.rest_url()
        self.timezone = timezone
        self.timeout = timeout
        token = config.access_token or config.anon_key
        self.headers = {
            "apikey": config.anon_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
    ) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RemoteStoreError(f"Request to {path} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteStoreError(f"Invalid JSON returned by {path}: {e}") from e

    # Weekly availability

    def fetch_availability(self, user_id: str) -> Dict[str, List[TimeSlot]]:
        """
        Fetch the weekly availability of a sitter.

        Returns:
            Dictionary mapping weekday name -> list of TimeSlot objects
        """
        rows = self._request(
            "GET",
            self.WEEKLY_TABLE,
            params={
                "select": "id,sitter_id,weekday,start_time,end_time",
                "sitter_id": f"eq.{user_id}",
            },
        ) or []

        availability: Dict[str, List[TimeSlot]] = {day: [] for day in WEEKDAYS}

        for row in rows:
            weekday = row.get("weekday")
            if not isinstance(weekday, int) or not 1 <= weekday <= 7:
                logger.warning("Skipping availability row with invalid weekday: %s", row)
                continue
            try:
                slot = TimeSlot(
                    id=str(row["id"]),
                    start=row["start_time"][:5],
                    end=row["end_time"][:5],
                )
            except (KeyError, TypeError) as e:
                logger.warning("Could not parse availability row %s: %s", row, e)
                continue
            availability[WEEKDAYS[weekday - 1]].append(slot)

        logger.debug("Fetched %d weekly slots for %s", len(rows), user_id)
        return availability

    def save_availability(
        self,
        user_id: str,
        mapping: Mapping[str, Iterable[TimeSlot]],
    ) -> SaveResult:
        """
        Persist the weekly availability.

        Compares against what is stored, deletes removed and modified rows and
        re-inserts added and modified slots.
        """
        try:
            current = self.fetch_availability(user_id)
            ids_to_delete: List[str] = []
            inserts: List[Dict[str, Any]] = []

            for weekday, day in enumerate(WEEKDAYS, start=1):
                changes = diff_time_slots(current.get(day, []), mapping.get(day, []))
                logger.debug(
                    "%s: %d added, %d modified, %d removed, %d unchanged",
                    day,
                    len(changes.added),
                    len(changes.modified),
                    len(changes.removed),
                    len(changes.unchanged),
                )
                ids_to_delete.extend(slot.id for slot in changes.removed + changes.modified)
                inserts.extend(
                    {
                        "p_sitter_id": user_id,
                        "p_weekday": weekday,
                        "p_start_time": f"{slot.start}:00",
                        "p_end_time": f"{slot.end}:00",
                    }
                    for slot in changes.added + changes.modified
                )

            if ids_to_delete:
                self._request(
                    "DELETE",
                    self.WEEKLY_TABLE,
                    params={
                        "id": f"in.({','.join(ids_to_delete)})",
                        "sitter_id": f"eq.{user_id}",
                    },
                )

            for payload in inserts:
                self._request("POST", f"rpc/{self.INSERT_WEEKLY_RPC}", payload=payload)

        except RemoteStoreError as e:
            logger.error("Saving availability for %s failed: %s", user_id, e)
            return SaveResult(success=False, error=str(e))

        return SaveResult(success=True)

    # Date-based unavailability

    def fetch_unavailability(self, user_id: str) -> Dict[str, DateUnavailability]:
        """Fetch unavailable dates and ranges, keyed by ``YYYY-MM-DD``."""
        rows = self._request(
            "GET",
            self.UNAVAILABILITY_TABLE,
            params={
                "select": "id,unavailable_date,start_time,end_time",
                "sitter_id": f"eq.{user_id}",
                "order": "unavailable_date.asc",
            },
        ) or []

        result: Dict[str, DateUnavailability] = {}

        for row in rows:
            try:
                key = date_key(row["unavailable_date"])
            except (KeyError, InvalidDateError) as e:
                logger.warning("Could not parse unavailability row %s: %s", row, e)
                continue

            if isinstance(result.get(key), FullDay):
                continue

            if not row.get("start_time") or not row.get("end_time"):
                result[key] = FULL_DAY
                continue

            slot = TimeSlot(
                id=str(row.get("id") or ""),
                start=row["start_time"][:5],
                end=row["end_time"][:5],
            )
            existing = result.get(key)
            slots = existing.slots if isinstance(existing, PartialSlots) else ()
            result[key] = PartialSlots(slots=slots + (slot,))

        logger.debug("Fetched %d unavailable dates for %s", len(result), user_id)
        return result

    def save_unavailability(
        self,
        user_id: str,
        mapping: Mapping[str, DateUnavailability],
    ) -> bool:
        """Replace every unavailability row of the sitter with the given map."""
        rows: List[Dict[str, Any]] = []
        for key, entry in mapping.items():
            if isinstance(entry, PartialSlots):
                rows.extend(
                    {
                        "sitter_id": user_id,
                        "unavailable_date": key,
                        "start_time": f"{slot.start}:00",
                        "end_time": f"{slot.end}:00",
                    }
                    for slot in entry.slots
                )
            else:
                rows.append({"sitter_id": user_id, "unavailable_date": key})

        try:
            self._request(
                "DELETE",
                self.UNAVAILABILITY_TABLE,
                params={"sitter_id": f"eq.{user_id}"},
            )
            if rows:
                self._request("POST", self.UNAVAILABILITY_TABLE, payload=rows)
        except RemoteStoreError as e:
            logger.error("Saving unavailability for %s failed: %s", user_id, e)
            return False

        logger.debug("Saved %d unavailability rows for %s", len(rows), user_id)
        return True

    def check_day_has_unavailability(self, user_id: str, date: DateLike) -> bool:
        """Ask the store whether a date carries any unavailability."""
        rows = self._request(
            "GET",
            self.UNAVAILABILITY_TABLE,
            params={
                "select": "id",
                "sitter_id": f"eq.{user_id}",
                "unavailable_date": f"eq.{date_key(date)}",
                "limit": "1",
            },
        )
        return bool(rows)

    # Boarding dates

    def _today(self) -> Date:
        return pendulum.today(self.timezone).date()

    def _fetch_boarding_rows(self, user_id: str) -> List[Dict[str, Any]]:
        return self._request(
            "GET",
            self.BOARDING_TABLE,
            params={
                "select": "id,available_date",
                "sitter_id": f"eq.{user_id}",
                "available_date": f"gte.{self._today().to_date_string()}",
                "order": "available_date.asc",
            },
        ) or []

    def fetch_boarding_dates(self, user_id: str) -> List[Date]:
        """Boarding dates from today onwards, ascending."""
        dates: List[Date] = []
        for row in self._fetch_boarding_rows(user_id):
            try:
                dates.append(to_date(row["available_date"]))
            except (KeyError, InvalidDateError) as e:
                logger.warning("Could not parse boarding row %s: %s", row, e)
        return dates

    def save_boarding_dates(self, user_id: str, dates: Iterable[DateLike]) -> SaveResult:
        """Insert new boarding dates and delete the ones no longer selected."""
        try:
            new_keys = sorted({date_key(value) for value in dates})
            existing = {
                date_key(row["available_date"]): str(row["id"])
                for row in self._fetch_boarding_rows(user_id)
            }

            to_add = [key for key in new_keys if key not in existing]
            ids_to_remove = [row_id for key, row_id in existing.items() if key not in new_keys]
            logger.debug(
                "Boarding dates: %d to add, %d to remove", len(to_add), len(ids_to_remove)
            )

            if ids_to_remove:
                self._request(
                    "DELETE",
                    self.BOARDING_TABLE,
                    params={"id": f"in.({','.join(ids_to_remove)})"},
                )
            if to_add:
                self._request(
                    "POST",
                    self.BOARDING_TABLE,
                    payload=[{"sitter_id": user_id, "available_date": key} for key in to_add],
                )
        except RemoteStoreError as e:
            logger.error("Saving boarding dates for %s failed: %s", user_id, e)
            return SaveResult(success=False, error=str(e))

        return SaveResult(success=True)
