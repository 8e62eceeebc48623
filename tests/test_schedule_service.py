"""
Tests for ScheduleService.
"""

import asyncio

import pendulum
import pytest

from sitterschedule.adapters.memory_store import InMemoryStore
from sitterschedule.domain.exceptions import (
    DateUnavailableError,
    PastDateError,
    RemoteStoreError,
    SaveInProgressError,
    SingleRangeOnlyError,
)
from sitterschedule.domain.models import AvailabilityMode, FullDay
from sitterschedule.services.schedule_service import SaveResult, ScheduleService

SITTER = "sitter-1"


@pytest.fixture
def store():
    return InMemoryStore(
        data={
            SITTER: {
                "availability": {
                    "monday": [{"id": "m1", "start": "09:00", "end": "17:00"}],
                },
                "unavailability": {
                    "2030-06-03": {"full_day": True},
                    "2030-06-04": {"slots": [{"id": "u1", "start": "10:00", "end": "11:00"}]},
                },
                "boarding": ["2030-06-10"],
            }
        }
    )


class RemoteBlockingStore(InMemoryStore):
    """Store that reports every date as blocked and counts the checks."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.checked = []

    def check_day_has_unavailability(self, user_id, date):
        self.checked.append(date)
        return True


class FailingStore(InMemoryStore):
    """Store whose weekly availability save always fails."""

    def save_availability(self, user_id, mapping):
        self.save_calls.append("availability")
        return SaveResult(success=False, error="boom")


class TestLoad:
    """Tests for loading a session."""

    def test_load_builds_session_from_store(self, store):
        """Test that loading fills every part of the session."""
        service = ScheduleService(store, mode=AvailabilityMode.GROOMING)

        session = asyncio.run(service.load(SITTER))

        assert session.user_id == SITTER
        assert [s.id for s in session.weekly.slots_for("monday")] == ["m1"]
        assert isinstance(session.unavailability.get("2030-06-03"), FullDay)
        assert session.unavailability.slots_for("2030-06-04")[0].id == "u1"
        assert session.boarding.to_list() == ["2030-06-10"]

    def test_unknown_sitter_gives_empty_session(self, store):
        """Test loading a sitter without stored data."""
        session = asyncio.run(ScheduleService(store).load("someone-else"))

        assert session.weekly.is_empty()
        assert len(session.unavailability) == 0
        assert len(session.boarding) == 0

    def test_mode_and_today_are_applied(self, store):
        """Test that the service settings reach the session."""
        service = ScheduleService(
            store,
            mode=AvailabilityMode.WALKING,
            today=lambda: pendulum.date(2030, 6, 1),
        )
        session = asyncio.run(service.load(SITTER))

        with pytest.raises(SingleRangeOnlyError):
            session.weekly.add_slot("monday", "18:00", "19:00")
        with pytest.raises(PastDateError):
            session.unavailability.toggle_date_unavailable("2030-05-31")


class TestSave:
    """Tests for saving a session."""

    def test_save_writes_every_part(self, store):
        """Test that saving stores all three parts."""
        service = ScheduleService(store, mode=AvailabilityMode.GROOMING)

        async def edit_and_save():
            session = await service.load(SITTER)
            session.weekly.add_slot("tuesday", "09:00", "10:00")
            session.unavailability.toggle_date_unavailable("2030-06-03")
            await service.toggle_boarding_date(session, "2030-06-12")
            await service.save(session)
            return await service.load(SITTER)

        reloaded = asyncio.run(edit_and_save())

        assert store.save_calls == ["availability", "unavailability", "boarding"]
        assert len(reloaded.weekly.slots_for("tuesday")) == 1
        assert reloaded.unavailability.get("2030-06-03") is None
        assert reloaded.boarding.to_list() == ["2030-06-10", "2030-06-12"]
        assert not service.is_saving

    def test_failed_save_raises_and_keeps_session(self):
        """Test that a failed save raises and keeps the edits."""
        store = FailingStore(data={SITTER: {}})
        service = ScheduleService(store)

        async def edit_and_save():
            session = await service.load(SITTER)
            session.weekly.add_slot("monday", "09:00", "10:00")
            with pytest.raises(RemoteStoreError) as exc_info:
                await service.save(session)
            return session, exc_info.value

        session, error = asyncio.run(edit_and_save())

        assert "Failed to save your schedule" in str(error)
        assert "availability (boom)" in str(error)
        assert len(session.weekly.slots_for("monday")) == 1
        assert not service.is_saving

    def test_concurrent_save_is_rejected(self, store):
        """Test that a second save during a save is rejected."""
        service = ScheduleService(store)

        async def save_twice():
            session = await service.load(SITTER)
            return await asyncio.gather(
                service.save(session),
                service.save(session),
                return_exceptions=True,
            )

        first, second = asyncio.run(save_twice())

        assert first is None
        assert isinstance(second, SaveInProgressError)
        assert store.save_calls == ["availability", "unavailability", "boarding"]


class TestToggleBoarding:
    """Tests for boarding selection through the service."""

    def test_remote_unavailability_blocks_date(self):
        """Test that stored unavailability blocks boarding."""
        store = RemoteBlockingStore(data={SITTER: {}})
        service = ScheduleService(store)

        async def toggle():
            session = await service.load(SITTER)
            with pytest.raises(DateUnavailableError):
                await service.toggle_boarding_date(session, "2030-06-20")
            return session

        session = asyncio.run(toggle())

        assert store.checked == [pendulum.date(2030, 6, 20)]
        assert not session.boarding.contains("2030-06-20")

    def test_deselecting_skips_remote_check(self):
        """Test that deselecting never asks the store."""
        store = RemoteBlockingStore(data={SITTER: {"boarding": ["2030-06-10"]}})
        service = ScheduleService(store)

        async def toggle():
            session = await service.load(SITTER)
            selected = await service.toggle_boarding_date(session, "2030-06-10")
            return session, selected

        session, selected = asyncio.run(toggle())

        assert selected is False
        assert store.checked == []
        assert len(session.boarding) == 0

    def test_locally_blocked_date_is_rejected(self, store):
        """Test that session unavailability blocks boarding."""
        service = ScheduleService(store)

        async def toggle():
            session = await service.load(SITTER)
            await service.toggle_boarding_date(session, "2030-06-04")

        with pytest.raises(DateUnavailableError):
            asyncio.run(toggle())


def test_bookable_slots(store):
    """Test bookable slots through the service."""
    service = ScheduleService(store)
    session = asyncio.run(service.load(SITTER))

    # 2030-06-03 is a fully unavailable Monday, 2030-06-10 a free one
    assert service.bookable_slots(session, "2030-06-03") == []
    assert [s.id for s in service.bookable_slots(session, "2030-06-10")] == ["m1"]
