"""
Port interfaces for DisasterLens hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .store import StorePort

__all__ = ["StorePort"]
