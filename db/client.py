from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client

from config.settings import get_settings
from core.errors import ConfigurationError


@lru_cache(maxsize=1)
def get_server_client() -> Client:
    """Supabase client used by the HTTP service for conversation storage."""
    settings = get_settings()
    if not settings.supabase_db_url or not settings.supabase_db_public_key:
        raise ConfigurationError("SUPABASE_DB_URL and SUPABASE_DB_PUBLIC_KEY must be set")
    return create_client(settings.supabase_db_url, settings.supabase_db_public_key)


@lru_cache(maxsize=1)
def get_public_client() -> Client:
    """Supabase client built from the public (anon) credentials, used for auth sessions."""
    settings = get_settings()
    if not settings.public_supabase_url or not settings.public_supabase_anon_key:
        raise ConfigurationError("PUBLIC_SUPABASE_URL and PUBLIC_SUPABASE_ANON_KEY must be set")
    return create_client(settings.public_supabase_url, settings.public_supabase_anon_key)
