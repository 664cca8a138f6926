from __future__ import annotations

import logging
from typing import Iterator, Optional

import httpx
from fastapi import Depends, Header
from supabase import AuthError as ProviderAuthError
from supabase import Client

from config.settings import Settings, get_settings
from conversation.store import ConversationStore
from core.errors import AuthError
from db.client import get_server_client


logger = logging.getLogger("voicelog")


def get_http_client(settings: Settings = Depends(get_settings)) -> Iterator[httpx.Client]:
    with httpx.Client(timeout=settings.http_timeout) as client:
        yield client


def get_conversation_store(
    settings: Settings = Depends(get_settings),
    client: Client = Depends(get_server_client),
) -> ConversationStore:
    return ConversationStore(client, table=settings.conversations_table)


def get_current_owner_id(
    authorization: Optional[str] = Header(None),
    client: Client = Depends(get_server_client),
) -> str:
    """Validate a Supabase access token and return the user's id."""
    if not authorization:
        raise AuthError("Missing authorization header")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError("Malformed authorization header")

    try:
        res = client.auth.get_user(parts[1])
    except ProviderAuthError as exc:
        logger.warning("Token validation failed: %s", exc)
        raise AuthError("Invalid or expired token") from exc

    user = getattr(res, "user", None) if res else None
    if user is None:
        raise AuthError("Invalid or expired token")
    return str(user.id)
