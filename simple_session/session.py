"""
Session — Encrypted key-value storage bound to a client session.

Provides the public API:
- ``set(key, value)`` — encrypt and persist a value
- ``get(key)`` — decrypt and return a value (``None`` if missing)
- ``get_all()`` / ``all()`` — decrypted mapping / raw encrypted mapping
- ``destroy(key)`` / ``destroy_all()`` / ``restart()``
- ``set_flash_message()`` / ``get_flash_message()`` — read-once values

Every mutation is written through to the backend before returning.

Security Note:
    Never log plaintext or ciphertext values. Only log session names,
    key names and operations. ``last_access_time`` is the one value kept
    unencrypted in the store; it is an integer timestamp used by the
    identifier rotation and is not part of ``get()`` / ``get_all()``.
"""
import time
import logging
from typing import Any, Callable, Optional
from collections.abc import Iterator

from .backends import SessionBackend, default_backend
from .conf import LAST_ACCESS_KEY, SESSION_NAME
from .config import SessionConfig, validate_config
from .crypto import encrypt_value, decrypt_value
from .exceptions import DecryptionFailure
from .flash import FlashMessenger
from .keys import KeyProvider, default_key_provider
from .rotation import IdentityRotator
from .transport import CookieTransport, SessionTransport

logger = logging.getLogger("simple_session")


class Session:
    """Encrypted session store.

    Construction validates the configuration, fetches the encryption key and
    then resumes the session active in this request, or starts it through the
    backend (rotating its identifier when older than ``timeout``).

    Args:
        name: Session name, used as the cookie name.
        config: Optional configuration bag (see ``validate_config``).
        use_this_name_first: When True, ``name`` wins over ``config.name``.
        backend: Session storage; the process-wide file backend by default.
        transport: Cookie layer of the current request.
        key_provider: Source of the encryption key; the daily file key by default.
        clock: Returns the current UNIX time.

    Raises:
        InvalidConfiguration: If the configuration is malformed.
        KeyProviderError: If no encryption key can be obtained.
    """

    def __init__(
        self,
        name: str = SESSION_NAME,
        config: Any = None,
        use_this_name_first: bool = False,
        *,
        backend: Optional[SessionBackend] = None,
        transport: Optional[SessionTransport] = None,
        key_provider: Optional[KeyProvider] = None,
        clock: Callable[[], float] = time.time,
    ):
        cfg = validate_config(config)
        if use_this_name_first or not cfg.name:
            session_name = name or SESSION_NAME
        else:
            session_name = cfg.name
        self._config: SessionConfig = cfg.model_copy(update={"name": session_name})
        self._key_provider = key_provider or default_key_provider()
        # fetched before touching the backend: no partial session on failure
        self._key = self._key_provider.get_key()
        self._backend = backend or default_backend()
        self._transport = transport or CookieTransport()
        self._clock = clock
        self._session_id = self._start()
        self._store: dict[str, Any] = self._backend.load(self._session_id)
        self._flash: Optional[FlashMessenger] = None

    def __repr__(self) -> str:
        return (
            f'<Simple-Session [{self.name}] keys={self.keys()!r}>'
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _start(self) -> str:
        active = self._transport.active_id(self.name)
        if active is not None:
            return active
        session_id = self._backend.start(self._transport.incoming_id(self.name))
        rotator = IdentityRotator(self._config.timeout, clock=self._clock)
        session_id = rotator.rotate(self._backend, session_id)
        self._transport.activate(self.name, session_id, self._config)
        logger.debug("Session %s started", self.name)
        return session_id

    def _persist(self) -> None:
        self._backend.persist(self._session_id, dict(self._store))

    def open_sibling(self, name: str) -> "Session":
        """Open another named session of the same request.

        The sibling shares backend, transport, key provider, clock and
        cookie attributes with this session.
        """
        return Session(
            name,
            self._config,
            True,
            backend=self._backend,
            transport=self._transport,
            key_provider=self._key_provider,
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Key validation / crypto helpers
    # ------------------------------------------------------------------

    def _validate_key(self, key: str, allow_reserved: bool = False) -> None:
        """Validate a session key name.

        Args:
            key: Key to check.
            allow_reserved: Accept ``last_access_time`` (read access only).

        Raises:
            ValueError: If key is not a string, empty, too long or reserved.
        """
        if not isinstance(key, str):
            raise ValueError(f"Session key must be a string, got {type(key).__name__}")
        if not key:
            raise ValueError("Session key cannot be empty")
        if len(key) > 255:
            raise ValueError("Session key cannot exceed 255 characters")
        if key == LAST_ACCESS_KEY and not allow_reserved:
            raise ValueError(f"Session key '{LAST_ACCESS_KEY}' is reserved")

    def _decrypt(self, key: str, blob: str) -> Any:
        try:
            return decrypt_value(blob, self._key)
        except DecryptionFailure as err:
            logger.warning("Cannot decrypt session %s key=%s", self.name, key)
            raise DecryptionFailure(
                f"Cannot decrypt session value '{key}': {err}", key=key
            ) from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Encrypt and persist a value.

        Args:
            key: Value name (max 255 chars, not ``last_access_time``).
            value: Any value jsonpickle can serialize.

        Raises:
            ValueError: If key is invalid.
        """
        self._validate_key(key)
        self._store[key] = encrypt_value(value, self._key)
        self._persist()
        logger.debug("Session set: session=%s key=%s", self.name, key)

    def get(self, key: Optional[str] = None) -> Any:
        """Decrypt and return a value.

        Args:
            key: Value name. When omitted, every value is returned.

        Returns:
            The decrypted value, ``None`` if key is missing, or a dict of
            all decrypted values when no key is given. ``last_access_time``
            is only returned when asked for by name.

        Raises:
            ValueError: If key is not a valid key name.
            DecryptionFailure: If a stored value cannot be decrypted.
        """
        if key is None:
            return self.get_all()
        self._validate_key(key, allow_reserved=True)
        if key not in self._store:
            return None
        if key == LAST_ACCESS_KEY:
            return self._store[key]
        return self._decrypt(key, self._store[key])

    def get_all(self) -> dict[str, Any]:
        """Return all values, decrypted, without ``last_access_time``."""
        return {
            key: self._decrypt(key, blob)
            for key, blob in self._store.items()
            if key != LAST_ACCESS_KEY
        }

    def all(self) -> dict[str, Any]:
        """Return a copy of the raw store, values still encrypted."""
        return dict(self._store)

    def has(self, key: str) -> bool:
        return key != LAST_ACCESS_KEY and key in self._store

    def keys(self) -> list[str]:
        return [key for key in self._store if key != LAST_ACCESS_KEY]

    def destroy(self, key: str) -> None:
        """Remove a value; missing keys are ignored.

        Raises:
            ValueError: If key is invalid or ``last_access_time``.
        """
        self._validate_key(key)
        if self._store.pop(key, None) is not None:
            logger.debug("Session destroy: session=%s key=%s", self.name, key)
        self._persist()

    def destroy_all(self) -> None:
        """Destroy the backend session and continue with an empty one.

        The old identifier is invalidated; a fresh, empty session is started
        under a new identifier and handed to the transport.
        """
        self._backend.destroy(self._session_id)
        self._store = {}
        self._session_id = self._backend.start()
        self._persist()
        self._transport.activate(self.name, self._session_id, self._config)
        logger.debug("Session %s destroyed", self.name)

    def restart(self) -> None:
        """Alias of :meth:`destroy_all`."""
        self.destroy_all()

    # ------------------------------------------------------------------
    # Flash messages
    # ------------------------------------------------------------------

    @property
    def flash(self) -> FlashMessenger:
        if self._flash is None:
            self._flash = FlashMessenger.for_session(self)
        return self._flash

    def set_flash_message(self, key: str, value: Any) -> None:
        self.flash.set_flash(key, value)

    def get_flash_message(self, key: str) -> Any:
        """Return a flash message and remove it; ``None`` once consumed."""
        return self.flash.get_flash(key)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def last_access_time(self) -> Optional[int]:
        return self._store.get(LAST_ACCESS_KEY)

    def get_session_name(self) -> str:
        return self.name

    def get_same_site(self) -> str:
        return self._config.same_site

    def get_session_timeout(self) -> int:
        return self._config.timeout

    def is_secure(self) -> bool:
        return self._config.secure is True

    def is_http_only(self) -> bool:
        return self._config.http_only is True

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self.keys())

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __contains__(self, key: object) -> bool:
        return self.has(str(key))
