"""
File Session Backend
One JSON file per session id, the default storage.
"""
import os
import time
import logging
import tempfile
from pathlib import Path
from typing import Any, Union

import orjson

from ..conf import SESSION_STORAGE_DIR
from ..exceptions import SessionBackendError
from .base import SessionBackend

logger = logging.getLogger("simple_session.backends")


class FileSessionBackend(SessionBackend):

    def __init__(self, directory: Union[str, os.PathLike, None] = None):
        """
        Initialize file session backend

        Args:
            directory: Directory for session files
        """
        self.directory = Path(directory or SESSION_STORAGE_DIR)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise SessionBackendError(
                f"Cannot create session directory {self.directory}: {err}"
            ) from err

    def _session_file(self, session_id: str) -> Path:
        if not self.is_valid_id(session_id):
            raise SessionBackendError("Malformed session id")
        return self.directory / f"sess_{session_id}.json"

    def exists(self, session_id: str) -> bool:
        if not self.is_valid_id(session_id):
            return False
        return self._session_file(session_id).exists()

    def load(self, session_id: str) -> dict[str, Any]:
        path = self._session_file(session_id)
        try:
            return orjson.loads(path.read_bytes())
        except FileNotFoundError:
            return {}
        except (OSError, orjson.JSONDecodeError) as err:
            logger.error("Unable to load session file %s: %s", path.name, err)
            raise SessionBackendError(f"Unable to load session: {err}") from err

    def persist(self, session_id: str, data: dict[str, Any]) -> None:
        path = self._session_file(session_id)
        try:
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".sess_")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(orjson.dumps(data))
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError) as err:
            logger.error("Unable to persist session file %s: %s", path.name, err)
            raise SessionBackendError(f"Unable to persist session: {err}") from err

    def destroy(self, session_id: str) -> None:
        if not self.is_valid_id(session_id):
            return
        try:
            self._session_file(session_id).unlink(missing_ok=True)
        except OSError as err:
            raise SessionBackendError(f"Unable to destroy session: {err}") from err

    def gc(self, max_lifetime: int) -> int:
        limit = time.time() - max_lifetime
        removed = 0
        for path in self.directory.glob("sess_*.json"):
            try:
                if path.stat().st_mtime < limit:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                continue
        if removed:
            logger.debug("Removed %d expired session file(s)", removed)
        return removed
