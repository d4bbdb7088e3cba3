from __future__ import annotations

import logging
import time
from typing import Iterator, Optional

from openai import OpenAI

from .config import Settings

logger = logging.getLogger(__name__)


class ChatClient:
    def __init__(self, settings: Settings) -> None:
        if not settings.api_key:
            raise RuntimeError(
                "Missing CHAT_API_KEY / DEEPSEEK_API_KEY (or OPENAI_API_KEY). Set it in the environment before starting the UI."
            )
        self._settings = settings
        self._client = OpenAI(api_key=settings.api_key, base_url=settings.base_url)

    def _create(self, messages: list[dict], *, temperature: float, max_tokens: int, session_id: str | None, stream: bool):
        extra: dict = {}
        if session_id:
            # The conversation's session id travels as the `user` field.
            extra["user"] = session_id
        if stream:
            extra["stream"] = True
        return self._client.chat.completions.create(
            model=self._settings.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=self._settings.timeout_s,
            **extra,
        )

    def chat(
        self,
        messages: list[dict],
        temperature: float = 0.2,
        max_tokens: int = 1200,
        session_id: str | None = None,
    ) -> str:
        """One-shot completion, retried up to `max_retries` times with linear backoff."""
        last_err: Optional[Exception] = None
        attempts = self._settings.max_retries + 1
        for attempt in range(attempts):
            try:
                resp = self._create(
                    messages, temperature=temperature, max_tokens=max_tokens, session_id=session_id, stream=False
                )
                return (resp.choices[0].message.content or "").strip()
            except Exception as e:  # noqa: BLE001
                last_err = e
                if attempt + 1 < attempts:
                    logger.warning("Chat request failed (attempt %d/%d): %s", attempt + 1, attempts, e)
                    time.sleep(0.6 * (attempt + 1))
        raise last_err  # type: ignore[misc]

    def chat_stream(
        self,
        messages: list[dict],
        temperature: float = 0.2,
        max_tokens: int = 1200,
        session_id: str | None = None,
    ) -> Iterator[str]:
        """
        Stream assistant output incrementally.

        Notes:
        - Empty deltas (role-only / finish events) are skipped.
        - If the stream cannot be opened, falls back to a single .chat() reply.
          Errors after the first event propagate to the caller.
        """
        try:
            resp = self._create(
                messages, temperature=temperature, max_tokens=max_tokens, session_id=session_id, stream=True
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Streaming request failed, retrying without streaming: %s", e)
            reply = self.chat(messages, temperature=temperature, max_tokens=max_tokens, session_id=session_id)
            if reply:
                yield reply
            return

        for event in resp:
            if not event.choices:
                continue
            delta = getattr(event.choices[0], "delta", None)
            piece = (getattr(delta, "content", None) or "") if delta is not None else ""
            if piece:
                yield piece
