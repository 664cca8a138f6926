from __future__ import annotations

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


USER_LINE = re.compile(r"^\[user\]:\s*(.+)$")
ASSISTANT_LINE = re.compile(r"^\[AI\]:\s*(.+)$")

# Same two prefixes, scanned over the whole text at once.
_ANY_TURN = re.compile(r"^\[(?:user|AI)\]:.+$", re.MULTILINE)


class Message(BaseModel):
    role: Literal["user", "assistant"] = Field(..., description="'user' or 'assistant'")
    content: str


def parse_conversation_text(text: Optional[str]) -> List[Message]:
    """Turn a ``[user]: ...`` / ``[AI]: ...`` transcript into ordered messages.

    Lines matching neither prefix are dropped.
    """
    if not text:
        return []

    messages: List[Message] = []
    for line in text.split("\n"):
        user_match = USER_LINE.match(line)
        if user_match:
            messages.append(Message(role="user", content=user_match.group(1).strip()))
            continue

        ai_match = ASSISTANT_LINE.match(line)
        if ai_match:
            messages.append(Message(role="assistant", content=ai_match.group(1).strip()))
    return messages


def count_messages(text: Optional[str]) -> int:
    if not text:
        return 0
    return len(_ANY_TURN.findall(text))
