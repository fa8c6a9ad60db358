"""
Storage adapters for DisasterLens.

This module contains the persistence adapters: the SQLite primary
store, the in-memory fallback and the ordered store chain.
"""

from .sqlite_store import SQLiteStore
from .memory_store import MemoryStore
from .chain import StoreChain

__all__ = ["SQLiteStore", "MemoryStore", "StoreChain"]
