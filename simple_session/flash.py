"""
Flash messages — values that can be read exactly once.

Flash entries live in their own session, named ``session_flash_data``,
opened alongside the application session with the same backend, transport
and key.
"""
from typing import Any, Callable, TYPE_CHECKING

from .conf import FLASH_SESSION_NAME

if TYPE_CHECKING:
    from .session import Session


class FlashMessenger:
    """One-shot messages on top of a dedicated flash session."""

    def __init__(self, opener: Callable[[], "Session"]):
        self._open = opener

    @classmethod
    def for_session(cls, session: "Session") -> "FlashMessenger":
        return cls(lambda: session.open_sibling(FLASH_SESSION_NAME))

    def set_flash(self, key: str, value: Any) -> None:
        self._open().set(key, value)

    def get_flash(self, key: str) -> Any:
        """Return a flash value and remove it.

        The entry is removed even if it cannot be decrypted, so a broken
        message is never served twice either.
        """
        session = self._open()
        try:
            return session.get(key)
        finally:
            session.destroy(key)

    def has_flash(self, key: str) -> bool:
        return self._open().has(key)
