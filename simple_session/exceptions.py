"""Simple Session exceptions."""
from typing import Optional


class SessionError(Exception):
    """Base class for all session errors."""


class InvalidConfiguration(SessionError, ValueError):
    """A session configuration field has the wrong type or value."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(
            message or f"Invalid session configuration for field '{field}'"
        )


class KeyProviderError(SessionError, RuntimeError):
    """The encryption key could not be generated or read.

    Without a key no value can be encrypted or decrypted, so this is
    never recovered internally.
    """


class DecryptionFailure(SessionError):
    """An encrypted value cannot be decrypted with the current key."""

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)


class SessionBackendError(SessionError, RuntimeError):
    """The backend session storage failed to load or persist data."""
