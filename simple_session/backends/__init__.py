"""Server-side session storage backends."""
from functools import lru_cache

from .base import SessionBackend
from .memory import MemorySessionBackend
from .file import FileSessionBackend


@lru_cache(maxsize=1)
def default_backend() -> FileSessionBackend:
    """Process-wide file backend, created on first use."""
    return FileSessionBackend()


__all__ = (
    "SessionBackend",
    "MemorySessionBackend",
    "FileSessionBackend",
    "default_backend",
)
