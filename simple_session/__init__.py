"""Simple Session — Server-side sessions with values encrypted at rest.

Security Note (Threat Model):
    Values are encrypted under a key rotated once per day and stored on disk
    next to the session files. Anyone able to read both the key directory
    and the session storage can recover the plaintext. Crossing the daily
    key boundary makes older values undecryptable by design.
"""
from .version import __version__
from .config import SessionConfig, validate_config
from .exceptions import (
    SessionError,
    InvalidConfiguration,
    KeyProviderError,
    DecryptionFailure,
    SessionBackendError,
)
from .keys import KeyProvider, FileKeyProvider, StaticKeyProvider, default_key_provider
from .backends import (
    SessionBackend,
    MemorySessionBackend,
    FileSessionBackend,
)
from .transport import SessionTransport, CookieTransport, AiohttpTransport
from .rotation import IdentityRotator
from .flash import FlashMessenger
from .session import Session

__all__ = [
    "__version__",
    "Session",
    "SessionConfig",
    "validate_config",
    "FlashMessenger",
    "IdentityRotator",
    "KeyProvider",
    "FileKeyProvider",
    "StaticKeyProvider",
    "default_key_provider",
    "SessionBackend",
    "MemorySessionBackend",
    "FileSessionBackend",
    "SessionTransport",
    "CookieTransport",
    "AiohttpTransport",
    "SessionError",
    "InvalidConfiguration",
    "KeyProviderError",
    "DecryptionFailure",
    "SessionBackendError",
]
