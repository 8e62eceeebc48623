"""
In-process schedule store for testing without a Supabase project.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pendulum import Date

from ..domain.exceptions import RemoteStoreError
from ..domain.models import (
    WEEKDAYS,
    DateLike,
    DateUnavailability,
    TimeSlot,
    date_key,
    to_date,
    unavailability_from_dict,
)
from ..services.schedule_service import SaveResult

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Store that keeps schedules in a dictionary.

    The data can be seeded from (and written back to) a JSON file of the form::

        {
          "<sitter id>": {
            "availability": {"monday": [{"id": "a1", "start": "09:00", "end": "12:00"}]},
            "unavailability": {"2025-06-02": {"full_day": true}},
            "boarding": ["2025-06-10"]
          }
        }
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            data: Initial content, keyed by sitter id
            path: Optional JSON file that saves are written back to
        """
        self.path = path
        self._sitters: Dict[str, Dict[str, Any]] = {}
        self.save_calls: List[str] = []
        for user_id, record in (data or {}).items():
            self._sitters[user_id] = self._parse_record(record)

    @classmethod
    def from_json_file(cls, path: Path) -> "InMemoryStore":
        """Load mock schedule data from a JSON file; a missing file gives an empty store."""
        if not path.exists():
            logger.info("Mock data file %s not found, starting empty", path)
            return cls(path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RemoteStoreError(f"Could not read mock data from {path}: {e}") from e

        return cls(data=data, path=path)

    @staticmethod
    def _parse_record(record: Mapping[str, Any]) -> Dict[str, Any]:
        availability = {day: [] for day in WEEKDAYS}
        for day, slots in (record.get("availability") or {}).items():
            availability[day.lower()] = [TimeSlot.from_dict(slot) for slot in slots]

        unavailability = {
            date_key(key): unavailability_from_dict(value)
            for key, value in (record.get("unavailability") or {}).items()
        }
        boarding = sorted({to_date(value) for value in record.get("boarding") or []})

        return {
            "availability": availability,
            "unavailability": unavailability,
            "boarding": boarding,
        }

    def _record(self, user_id: str) -> Dict[str, Any]:
        if user_id not in self._sitters:
            self._sitters[user_id] = self._parse_record({})
        return self._sitters[user_id]

    def _write_back(self) -> None:
        if self.path is None:
            return
        data = {
            user_id: {
                "availability": {
                    day: [slot.to_dict() for slot in slots]
                    for day, slots in record["availability"].items()
                },
                "unavailability": {
                    key: entry.to_dict() for key, entry in record["unavailability"].items()
                },
                "boarding": [day.to_date_string() for day in record["boarding"]],
            }
            for user_id, record in self._sitters.items()
        }
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    def fetch_availability(self, user_id: str) -> Dict[str, List[TimeSlot]]:
        return {day: list(slots) for day, slots in self._record(user_id)["availability"].items()}

    def fetch_unavailability(self, user_id: str) -> Dict[str, DateUnavailability]:
        return dict(self._record(user_id)["unavailability"])

    def fetch_boarding_dates(self, user_id: str) -> List[Date]:
        return list(self._record(user_id)["boarding"])

    def check_day_has_unavailability(self, user_id: str, date: DateLike) -> bool:
        return date_key(date) in self._record(user_id)["unavailability"]

    def save_availability(
        self,
        user_id: str,
        mapping: Mapping[str, Iterable[TimeSlot]],
    ) -> SaveResult:
        self.save_calls.append("availability")
        self._record(user_id)["availability"] = {
            day: list(mapping.get(day, [])) for day in WEEKDAYS
        }
        self._write_back()
        return SaveResult(success=True)

    def save_unavailability(
        self,
        user_id: str,
        mapping: Mapping[str, DateUnavailability],
    ) -> bool:
        self.save_calls.append("unavailability")
        self._record(user_id)["unavailability"] = dict(mapping)
        self._write_back()
        return True

    def save_boarding_dates(self, user_id: str, dates: Iterable[DateLike]) -> SaveResult:
        self.save_calls.append("boarding")
        self._record(user_id)["boarding"] = sorted({to_date(value) for value in dates})
        self._write_back()
        return SaveResult(success=True)
