"""
Session Keys — Daily-rotated symmetric key shared by all sessions of a process.

The file provider keeps one key per calendar day in the key directory::

    <YYYY_MM_DD>_encrypt_key.txt   (hex-encoded 32 random bytes, mode 0600)

Creating the key for a new day removes the files of every other day, so values
encrypted before the boundary no longer decrypt after it.

Security Note:
    Never log key material. Only log date tags and file names.
"""
import os
import re
import fcntl
import secrets
import logging
from abc import ABC, abstractmethod
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Union

from .conf import SESSION_KEY_DIR
from .crypto import KEY_LENGTH
from .exceptions import KeyProviderError

logger = logging.getLogger("simple_session.keys")

DATE_FORMAT = "%Y_%m_%d"
KEY_FILE_SUFFIX = "_encrypt_key.txt"
_KEY_FILE_PATTERN = re.compile(r"^(\d{4}_\d{2}_\d{2})_encrypt_key\.txt$")


class KeyProvider(ABC):
    """Supplies the symmetric key used to encrypt session values."""

    @abstractmethod
    def get_key(self) -> bytes:
        """Return the raw 32-byte key currently in use."""


class StaticKeyProvider(KeyProvider):
    """Fixed key, e.g. injected from a KMS or used in tests."""

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise KeyProviderError(
                f"Session key must be exactly {KEY_LENGTH} bytes, got {len(key)}"
            )
        self._key = key

    @classmethod
    def generate(cls) -> "StaticKeyProvider":
        return cls(secrets.token_bytes(KEY_LENGTH))

    def get_key(self) -> bytes:
        return self._key


class FileKeyProvider(KeyProvider):
    """File-backed key provider rotating the key once per calendar day.

    Concurrent processes serialize the generation of a day's key with an
    exclusive ``flock`` on the key file; the losers read the winner's key.
    """

    def __init__(
        self,
        directory: Union[str, os.PathLike, None] = None,
        today: Callable[[], date] = date.today,
    ):
        self.directory = Path(directory or SESSION_KEY_DIR)
        self._today = today
        self._cached: Optional[tuple[str, bytes]] = None

    def key_file(self, tag: str) -> Path:
        return self.directory / f"{tag}{KEY_FILE_SUFFIX}"

    def get_key(self) -> bytes:
        """Return today's key, creating it on first use of the day.

        Raises:
            KeyProviderError: On any I/O failure or a malformed key file.
        """
        tag = self._today().strftime(DATE_FORMAT)
        if self._cached and self._cached[0] == tag:
            return self._cached[1]
        path = self.key_file(tag)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            key = self._read(path)
            if key is None:
                key = self._generate(path, tag)
        except OSError as err:
            logger.error("Unable to provide session key %s: %s", path.name, err)
            raise KeyProviderError(
                f"Unable to provide session key {path.name}: {err}"
            ) from err
        self._cached = (tag, key)
        return key

    def _decode(self, content: str, path: Path) -> bytes:
        try:
            key = bytes.fromhex(content.strip())
        except ValueError as err:
            raise KeyProviderError(f"Key file {path.name} is not hex-encoded") from err
        if len(key) != KEY_LENGTH:
            raise KeyProviderError(
                f"Key file {path.name} holds {len(key)} bytes, expected {KEY_LENGTH}"
            )
        return key

    def _read(self, path: Path) -> Optional[bytes]:
        if not path.exists():
            return None
        try:
            content = path.read_text(encoding="ascii")
        except UnicodeDecodeError as err:
            raise KeyProviderError(f"Key file {path.name} is not hex-encoded") from err
        if not content.strip():
            # created by a process still holding the lock
            return None
        return self._decode(content, path)

    def _generate(self, path: Path, tag: str) -> bytes:
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
        with os.fdopen(fd, "r+", encoding="ascii") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                existing = fh.read()
                if existing.strip():
                    return self._decode(existing, path)
                self._purge_stale(tag)
                key = secrets.token_bytes(KEY_LENGTH)
                fh.seek(0)
                fh.write(key.hex())
                fh.flush()
                os.fsync(fh.fileno())
                logger.info("Generated session key for %s", tag)
                return key
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def _purge_stale(self, tag: str) -> None:
        for existing in self.directory.glob(f"*{KEY_FILE_SUFFIX}"):
            match = _KEY_FILE_PATTERN.match(existing.name)
            if match and match.group(1) != tag:
                existing.unlink(missing_ok=True)
                logger.info("Removed stale session key %s", existing.name)


@lru_cache(maxsize=1)
def default_key_provider() -> FileKeyProvider:
    """Process-wide file key provider, created on first use."""
    return FileKeyProvider(SESSION_KEY_DIR)
