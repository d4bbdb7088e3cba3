from __future__ import annotations

import logging
import threading
import time
from typing import Iterator, Optional, Protocol

from .ids import IdGenerator
from .models import Conversation, Message

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
NO_RESPONSE_TEXT = "No response received from the server. Please try again later."
SEND_ERROR_TEXT = "Sorry, there was an error processing your request."
REGENERATE_ERROR_TEXT = "Sorry, there was an error regenerating the response."


class StreamingClient(Protocol):
    def chat_stream(self, messages: list[dict], *, session_id: str | None = None, **kwargs) -> Iterator[str]: ...


class ChatStore:
    """
    In-memory chat state for one UI session.
    - Multiple conversations, newest first
    - One in-flight exchange at a time
    - Nothing is written to disk
    """

    def __init__(self, ids: Optional[IdGenerator] = None) -> None:
        self._ids = ids or IdGenerator()
        self._lock = threading.RLock()
        self._conversations: list[Conversation] = []
        self.current_conversation_id: str | None = None
        self.is_loading = False
        self.error: str | None = None

    def _find(self, conv_id: str | None) -> Conversation | None:
        if not conv_id:
            return None
        for conv in self._conversations:
            if conv.id == conv_id:
                return conv
        return None

    def create_conversation(self, title: str = DEFAULT_TITLE) -> str:
        now = time.time()
        conv = Conversation(
            id=self._ids.conversation_id(),
            session_id=self._ids.session_id(),
            title=title.strip() or DEFAULT_TITLE,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._conversations.insert(0, conv)
            self.current_conversation_id = conv.id
        return conv.id

    def select_conversation(self, conv_id: str) -> bool:
        with self._lock:
            if self._find(conv_id) is None:
                return False
            self.current_conversation_id = conv_id
            return True

    def delete_conversation(self, conv_id: str) -> str | None:
        with self._lock:
            self._conversations = [c for c in self._conversations if c.id != conv_id]
            if self.current_conversation_id == conv_id:
                self.current_conversation_id = self._conversations[0].id if self._conversations else None
            return self.current_conversation_id

    def list_conversations(self) -> list[Conversation]:
        with self._lock:
            return sorted(self._conversations, key=lambda c: c.updated_at, reverse=True)

    def get_conversation(self, conv_id: str) -> Conversation | None:
        with self._lock:
            return self._find(conv_id)

    def current_conversation(self) -> Conversation | None:
        with self._lock:
            return self._find(self.current_conversation_id)

    def get_messages(self, conv_id: str) -> list[Message]:
        with self._lock:
            conv = self._find(conv_id)
            return list(conv.messages) if conv else []

    def update_conversation_title(self, conv_id: str, title: str) -> bool:
        title = (title or "").replace("\n", " ").strip()
        if not title:
            return False
        with self._lock:
            conv = self._find(conv_id)
            if conv is None:
                return False
            conv.title = title
            conv.updated_at = time.time()
            return True

    def append_to_last_message(self, conv_id: str, piece: str) -> None:
        with self._lock:
            conv = self._find(conv_id)
            if conv is None or not conv.messages:
                return
            last = conv.messages[-1]
            # Only a reply that is still streaming may grow.
            if last.role != "assistant" or not last.is_streaming:
                return
            last.content += piece
            conv.updated_at = time.time()

    def _finish_streaming(self, conv_id: str, msg_id: str) -> None:
        with self._lock:
            conv = self._find(conv_id)
            if conv is not None:
                for m in conv.messages:
                    if m.id == msg_id:
                        m.is_streaming = False
                conv.updated_at = time.time()
            self.is_loading = False

    def _stream_reply(
        self,
        client: StreamingClient,
        conv_id: str,
        msg_id: str,
        history: list[dict],
        session_id: str,
        error_text: str,
        stream_kwargs: dict,
    ) -> Iterator[str]:
        received = False
        try:
            for piece in client.chat_stream(history, session_id=session_id, **stream_kwargs):
                if not piece:
                    continue
                self.append_to_last_message(conv_id, piece)
                received = True
                yield piece
            if not received:
                self.append_to_last_message(conv_id, NO_RESPONSE_TEXT)
        except Exception as e:  # noqa: BLE001
            logger.error("Chat API error: %s", e)
            self.append_to_last_message(conv_id, error_text)
            self.error = f"Failed to get a response: {e}"
        finally:
            self._finish_streaming(conv_id, msg_id)

    def send_message(self, content: str, client: StreamingClient, **stream_kwargs) -> Iterator[str]:
        """
        Add the user's message plus a streaming assistant reply, then stream
        the reply into it. Yields each received piece.
        """
        content = (content or "").strip()
        if not content:
            return
        with self._lock:
            if self.is_loading:
                logger.warning("Another request is already in progress")
                return
            conv = self._find(self.current_conversation_id)
            if conv is None:
                conv = self._find(self.create_conversation())

            now = time.time()
            user_msg = Message(id=self._ids.message_id("user"), role="user", content=content, timestamp=now)
            reply = Message(id=self._ids.message_id("assistant"), role="assistant", timestamp=now, is_streaming=True)

            stale = [m for m in conv.messages if m.role == "assistant" and m.is_streaming]
            if stale:
                logger.warning("Cleaning up %d existing streaming messages", len(stale))
            if not conv.messages:
                conv.title = content[:50] + ("..." if len(content) > 50 else "")
            conv.messages = [m for m in conv.messages if not (m.role == "assistant" and m.is_streaming)]
            conv.messages.extend([user_msg, reply])
            conv.updated_at = now

            self.is_loading = True
            self.error = None
            history = conv.history()
            conv_id, session_id = conv.id, conv.session_id

        yield from self._stream_reply(client, conv_id, reply.id, history, session_id, SEND_ERROR_TEXT, stream_kwargs)

    def regenerate_response(self, message_id: str, client: StreamingClient, **stream_kwargs) -> Iterator[str]:
        """Replace an assistant reply (and anything after it) with a fresh one."""
        with self._lock:
            if self.is_loading:
                logger.warning("Another request is already in progress")
                return
            conv = self._find(self.current_conversation_id)
            if conv is None:
                return
            idx = next((i for i, m in enumerate(conv.messages) if m.id == message_id), -1)
            if idx <= 0:
                return
            if conv.messages[idx - 1].role != "user":
                return

            reply = Message(id=self._ids.message_id("assistant"), role="assistant", is_streaming=True)
            conv.messages = conv.messages[:idx] + [reply]
            conv.updated_at = time.time()

            self.is_loading = True
            self.error = None
            history = conv.history()
            conv_id, session_id = conv.id, conv.session_id

        yield from self._stream_reply(client, conv_id, reply.id, history, session_id, REGENERATE_ERROR_TEXT, stream_kwargs)

    def cleanup_streaming_messages(self) -> None:
        with self._lock:
            for conv in self._conversations:
                conv.messages = [m for m in conv.messages if not (m.role == "assistant" and m.is_streaming)]
            self.is_loading = False

    def clear_error(self) -> None:
        self.error = None
