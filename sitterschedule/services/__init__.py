"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_service import SaveResult, ScheduleService, ScheduleSession, ScheduleStoreProtocol

__all__ = ["SaveResult", "ScheduleService", "ScheduleSession", "ScheduleStoreProtocol"]
