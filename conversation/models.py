from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from conversation.parser import Message


class ConversationMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    saved_at: datetime = Field(..., alias="savedAt")
    message_count: int = Field(..., alias="messageCount")


class ConversationContent(BaseModel):
    """Structured payload stored in the ``content`` column."""

    text: str = ""
    messages: List[Message] = Field(default_factory=list)
    metadata: ConversationMetadata

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ConversationRecord(BaseModel):
    """One row of the conversations table, as returned by the database."""

    id: Union[int, str]
    owner_id: str
    content: ConversationContent
    created_at: Optional[datetime] = None
