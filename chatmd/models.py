from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, Field


class Message(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: float = Field(default_factory=time.time)
    is_streaming: bool = False


class Conversation(BaseModel):
    id: str
    session_id: str  # one backend session per conversation
    title: str = "New Chat"
    messages: list[Message] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    def history(self) -> list[dict]:
        """Finished messages as chat-completion dicts."""
        return [
            {"role": m.role, "content": m.content}
            for m in self.messages
            if not m.is_streaming
        ]
