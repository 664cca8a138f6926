"""Shared fixtures: isolated settings and a mocked Supabase client."""

from datetime import datetime, timezone
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

from config.settings import Settings, get_settings
from conversation.store import build_content


SAMPLE_TRANSCRIPT = "[user]: hello\n[AI]: hi there\nnote: ignore me\n[user]: bye"

_ENV_KEYS = (
    "APP_ENV",
    "OPENAI_API_KEY",
    "OPENAI_REALTIME_MODEL",
    "OPENAI_REALTIME_URL",
    "OPENAI_TRANSCRIPTION_MODEL",
    "REALTIME_DEFAULT_LANGUAGE",
    "HTTP_TIMEOUT",
    "SUPABASE_DB_URL",
    "SUPABASE_DB_PUBLIC_KEY",
    "PUBLIC_SUPABASE_URL",
    "PUBLIC_SUPABASE_ANON_KEY",
    "CONVERSATIONS_TABLE",
    "PUBLIC_SITE_URL",
    "VERCEL_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Start every test from an empty configuration."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide settings with a server secret configured."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return Settings()


@pytest.fixture
def mock_client() -> MagicMock:
    """Provide a mock Supabase client."""
    return MagicMock()


def make_row(
    record_id: Any = 1,
    owner_id: str = "user-1",
    text: str = SAMPLE_TRANSCRIPT,
) -> Dict[str, Any]:
    content = build_content(text, saved_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    return {
        "id": record_id,
        "owner_id": owner_id,
        "content": content.to_row(),
        "created_at": "2025-01-01T00:00:05+00:00",
    }
