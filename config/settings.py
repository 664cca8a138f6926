from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")

        # Realtime voice API (server-side secret only)
        self.openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY") or None
        self.realtime_model: str = os.getenv("OPENAI_REALTIME_MODEL", "gpt-realtime")
        self.realtime_url: str = os.getenv(
            "OPENAI_REALTIME_URL", "https://api.openai.com/v1/realtime/client_secrets"
        )
        self.transcription_model: str = os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1")
        self.default_language: str = os.getenv("REALTIME_DEFAULT_LANGUAGE", "ko")
        self.http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "10.0"))

        # Supabase: server client and public (anon) client
        self.supabase_db_url: Optional[str] = os.getenv("SUPABASE_DB_URL") or None
        self.supabase_db_public_key: Optional[str] = os.getenv("SUPABASE_DB_PUBLIC_KEY") or None
        self.public_supabase_url: Optional[str] = os.getenv("PUBLIC_SUPABASE_URL") or None
        self.public_supabase_anon_key: Optional[str] = (
            os.getenv("PUBLIC_SUPABASE_ANON_KEY") or None
        )
        self.conversations_table: str = os.getenv("CONVERSATIONS_TABLE", "conversations")

        # Only used to build auth callback links
        self.public_site_url: Optional[str] = os.getenv("PUBLIC_SITE_URL") or None
        self.vercel_url: Optional[str] = os.getenv("VERCEL_URL") or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
