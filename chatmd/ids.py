from __future__ import annotations

import itertools
import threading
import time
import uuid


class IdGenerator:
    """
    Collision-free identifiers for messages, sessions and conversations.

    Each generator owns its counter; two generators never share state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = itertools.count(1)

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    @staticmethod
    def _rand() -> str:
        return uuid.uuid4().hex[:9]

    def message_id(self, role: str) -> str:
        with self._lock:
            n = next(self._counter)
        return f"msg_{self._now_ms()}_{n}_{self._rand()}_{role}"

    def session_id(self) -> str:
        return f"session_{self._now_ms()}_{self._rand()}"

    def conversation_id(self) -> str:
        return f"conv_{self._now_ms()}_{self._rand()}"
