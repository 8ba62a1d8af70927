"""Session identifier rotation."""
import time
import logging
from typing import Callable

from .backends import SessionBackend
from .conf import LAST_ACCESS_KEY

logger = logging.getLogger("simple_session.rotation")


class IdentityRotator:
    """Regenerates a session id once it is older than the configured timeout.

    Runs right after a backend session is started for a request. The data is
    preserved under the new id and ``last_access_time`` is reset to now.
    """

    def __init__(self, timeout: int, clock: Callable[[], float] = time.time):
        self.timeout = timeout
        self._clock = clock

    def is_expired(self, last_access: int, now: int) -> bool:
        return now - last_access > self.timeout

    def rotate(self, backend: SessionBackend, session_id: str) -> str:
        """Rotate the session id if needed.

        Returns:
            The id to use for the rest of the request.
        """
        data = backend.load(session_id)
        last_access = data.get(LAST_ACCESS_KEY) or 0
        now = int(self._clock())
        if not self.is_expired(last_access, now):
            return session_id
        new_id = backend.regenerate(session_id)
        data = backend.load(new_id)
        data[LAST_ACCESS_KEY] = now
        backend.persist(new_id, data)
        logger.debug(
            "Session identifier regenerated after %ss (timeout %ss)",
            now - last_access, self.timeout,
        )
        return new_id
