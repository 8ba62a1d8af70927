"""
Session Backend Interface
Base class for the server-side storage of session data.
"""
import re
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


class SessionBackend(ABC):
    """Base session backend.

    Maps an opaque session id to a dict of stored values. Ids supplied by
    clients are only resumed when they are well-formed and already known.
    """

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def is_valid_id(self, session_id: str) -> bool:
        return isinstance(session_id, str) and bool(_SESSION_ID_PATTERN.match(session_id))

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        """Check if session exists."""

    @abstractmethod
    def load(self, session_id: str) -> dict[str, Any]:
        """
        Read session data.

        Returns:
            A copy of the stored data, empty if the session is unknown.
        """

    @abstractmethod
    def persist(self, session_id: str, data: dict[str, Any]) -> None:
        """Replace the stored data of a session, creating it if needed."""

    @abstractmethod
    def destroy(self, session_id: str) -> None:
        """Delete a session. Unknown ids are ignored."""

    @abstractmethod
    def gc(self, max_lifetime: int) -> int:
        """
        Remove sessions not written for more than max_lifetime seconds.

        Returns:
            Number of sessions deleted.
        """

    def start(self, session_id: Optional[str] = None) -> str:
        """Resume a known session or create an empty one.

        Returns:
            The id of the started session.
        """
        if session_id and self.is_valid_id(session_id) and self.exists(session_id):
            return session_id
        new_id = self.new_id()
        self.persist(new_id, {})
        return new_id

    def regenerate(self, session_id: str) -> str:
        """Move the data of a session under a new id and drop the old id."""
        data = self.load(session_id)
        new_id = self.new_id()
        self.persist(new_id, data)
        self.destroy(session_id)
        return new_id
