"""
Hosted Supabase backend adapter for DisasterLens.
"""

from .client import SupabaseStore

__all__ = ["SupabaseStore"]
