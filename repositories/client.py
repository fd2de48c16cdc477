"""
Supabase client initialization.

This module contains *only* the database connection setup and exposes a single
lazily-created `supabase` client for other repository modules to use.

Credentials come from config.get_settings() (SUPABASE_URL, SUPABASE_KEY).
"""

from __future__ import annotations

from functools import lru_cache

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

from config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Official Supabase Python client instance shared by the process."""

    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_key)


__all__ = ["get_supabase"]
