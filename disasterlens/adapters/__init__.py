"""
Adapters for DisasterLens hexagonal architecture.

This module contains the concrete implementations of the store port
that handle database and hosted-backend I/O.
"""

from .storage import SQLiteStore, MemoryStore, StoreChain
from .supabase import SupabaseStore

__all__ = ["SQLiteStore", "MemoryStore", "StoreChain", "SupabaseStore"]
