from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Union

import httpx
from supabase import Client, PostgrestAPIError

from conversation.models import ConversationContent, ConversationMetadata, ConversationRecord
from conversation.parser import count_messages, parse_conversation_text
from core.errors import NotFoundError, PersistenceError


logger = logging.getLogger("voicelog.conversations")

OWNER_COLUMN = "owner_id"
DEFAULT_LIST_LIMIT = 50

# API rejections from PostgREST and transport failures from its httpx session
DB_ERRORS = (PostgrestAPIError, httpx.HTTPError)


def _describe(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or type(exc).__name__


def build_content(transcript_text: Optional[str], saved_at: Optional[datetime] = None) -> ConversationContent:
    text = transcript_text or ""
    return ConversationContent(
        text=text,
        messages=parse_conversation_text(text),
        metadata=ConversationMetadata(
            saved_at=saved_at or datetime.now(timezone.utc),
            message_count=count_messages(text),
        ),
    )


class ConversationStore:
    """Conversation CRUD on top of a Supabase table.

    Every call goes straight to the database; nothing is cached here. Database
    rejections and transport failures are logged and re-raised as
    ``PersistenceError``.
    """

    def __init__(self, client: Client, table: str = "conversations") -> None:
        self._client = client
        self._table = table

    def _query(self):
        return self._client.table(self._table)

    def save(
        self,
        owner_id: str,
        transcript_text: Optional[str],
        debug_logs: Optional[Sequence[Any]] = None,
    ) -> ConversationRecord:
        # debug_logs is accepted for callers that pass it but is not stored.
        content = build_content(transcript_text)
        row = {OWNER_COLUMN: owner_id, "content": content.to_row()}
        try:
            response = self._query().insert([row]).execute()
        except DB_ERRORS as exc:
            logger.error("Conversation save failed: owner=%s error=%s", owner_id, exc)
            raise PersistenceError(f"Could not save conversation: {_describe(exc)}") from exc

        if not response.data:
            logger.error("Conversation save returned no row: owner=%s", owner_id)
            raise PersistenceError("Could not save conversation: no row returned")

        logger.info(
            "Saved conversation: owner=%s messages=%s",
            owner_id,
            content.metadata.message_count,
        )
        return ConversationRecord.model_validate(response.data[0])

    def list_by_owner(self, owner_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[ConversationRecord]:
        try:
            response = (
                self._query()
                .select("*")
                .eq(OWNER_COLUMN, owner_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except DB_ERRORS as exc:
            logger.error("Conversation list failed: owner=%s error=%s", owner_id, exc)
            raise PersistenceError(f"Could not list conversations: {_describe(exc)}") from exc

        return [ConversationRecord.model_validate(row) for row in response.data or []]

    def get_by_id(self, conversation_id: Union[int, str]) -> ConversationRecord:
        try:
            response = self._query().select("*").eq("id", conversation_id).limit(1).execute()
        except DB_ERRORS as exc:
            logger.error("Conversation fetch failed: id=%s error=%s", conversation_id, exc)
            raise PersistenceError(f"Could not load conversation: {_describe(exc)}") from exc

        if not response.data:
            logger.warning("Conversation not found: id=%s", conversation_id)
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return ConversationRecord.model_validate(response.data[0])

    def delete_by_id(self, conversation_id: Union[int, str]) -> None:
        try:
            self._query().delete().eq("id", conversation_id).execute()
        except DB_ERRORS as exc:
            logger.error("Conversation delete failed: id=%s error=%s", conversation_id, exc)
            raise PersistenceError(f"Could not delete conversation: {_describe(exc)}") from exc
        logger.info("Deleted conversation: id=%s", conversation_id)
