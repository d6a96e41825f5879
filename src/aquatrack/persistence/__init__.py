"""Persistence backends for the ledger."""

from .memory import InMemoryStore
from .store import DataStore, SupabaseStore, get_store

__all__ = ["DataStore", "SupabaseStore", "InMemoryStore", "get_store"]
