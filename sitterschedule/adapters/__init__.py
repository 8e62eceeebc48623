"""
Adapters layer - External integrations (Supabase REST API).
"""

from .memory_store import InMemoryStore
from .supabase_store import SupabaseStore, diff_time_slots

__all__ = ["InMemoryStore", "SupabaseStore", "diff_time_slots"]
