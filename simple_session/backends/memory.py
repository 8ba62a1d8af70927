"""
Memory Session Backend
Process-local session storage.
"""
import copy
import time
import threading
from typing import Any

from .base import SessionBackend


class MemorySessionBackend(SessionBackend):
    """Thread-safe in-memory session storage."""

    def __init__(self):
        self._sessions: dict[str, tuple[float, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def load(self, session_id: str) -> dict[str, Any]:
        with self._lock:
            entry = self._sessions.get(session_id)
            return copy.deepcopy(entry[1]) if entry else {}

    def persist(self, session_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._sessions[session_id] = (time.time(), copy.deepcopy(data))

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def gc(self, max_lifetime: int) -> int:
        limit = time.time() - max_lifetime
        with self._lock:
            expired = [sid for sid, (ts, _) in self._sessions.items() if ts < limit]
            for session_id in expired:
                del self._sessions[session_id]
        return len(expired)
