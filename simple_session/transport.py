"""
Session Transport — Carries the session identifier in a cookie.

A transport lives for one request. Besides reading the incoming cookie and
queuing the outgoing one, it remembers which session names were already
started during the request so a second ``Session`` with the same name resumes
the active session instead of starting (and rotating) it again.
"""
import logging
from abc import ABC, abstractmethod
from http.cookies import SimpleCookie
from typing import Optional

from aiohttp import web

from .config import SessionConfig

logger = logging.getLogger("simple_session.transport")


class SessionTransport(ABC):
    """Cookie layer of one request."""

    def __init__(self) -> None:
        self._active: dict[str, str] = {}

    def is_active(self, name: str) -> bool:
        return name in self._active

    def active_id(self, name: str) -> Optional[str]:
        return self._active.get(name)

    def activate(self, name: str, session_id: str, config: SessionConfig) -> None:
        """Mark a session as started in this request and send its cookie."""
        self._active[name] = session_id
        if config.same_site == "None" and not config.secure:
            logger.warning(
                "Session cookie %s uses SameSite=None without Secure; "
                "browsers will reject it", name
            )
        self.send_id(name, session_id, config)

    @abstractmethod
    def incoming_id(self, name: str) -> Optional[str]:
        """Session id carried by the request cookie, if any."""

    @abstractmethod
    def send_id(self, name: str, session_id: str, config: SessionConfig) -> None:
        """Queue the session cookie for the response."""


class CookieTransport(SessionTransport):
    """Framework-agnostic transport over raw ``Cookie`` / ``Set-Cookie`` headers."""

    def __init__(self, cookie_header: Optional[str] = None) -> None:
        super().__init__()
        self._incoming = SimpleCookie()
        if cookie_header:
            self._incoming.load(cookie_header)
        self._outgoing = SimpleCookie()

    def incoming_id(self, name: str) -> Optional[str]:
        morsel = self._incoming.get(name)
        return morsel.value if morsel else None

    def send_id(self, name: str, session_id: str, config: SessionConfig) -> None:
        self._outgoing[name] = session_id
        morsel = self._outgoing[name]
        morsel["path"] = "/"
        morsel["secure"] = config.secure
        morsel["httponly"] = config.http_only
        morsel["samesite"] = config.same_site

    def headers(self) -> list[tuple[str, str]]:
        """``Set-Cookie`` headers to add to the response."""
        return [
            ("Set-Cookie", morsel.OutputString())
            for morsel in self._outgoing.values()
        ]


class AiohttpTransport(SessionTransport):
    """Transport reading an aiohttp request and writing to its response."""

    def __init__(self, request: web.Request) -> None:
        super().__init__()
        self.request = request
        self._pending: dict[str, tuple[str, SessionConfig]] = {}

    def incoming_id(self, name: str) -> Optional[str]:
        return self.request.cookies.get(name)

    def send_id(self, name: str, session_id: str, config: SessionConfig) -> None:
        self._pending[name] = (session_id, config)

    def apply(self, response: web.StreamResponse) -> None:
        """Set the queued session cookies on the response."""
        for name, (session_id, config) in self._pending.items():
            response.set_cookie(
                name,
                session_id,
                path="/",
                secure=config.secure,
                httponly=config.http_only,
                samesite=config.same_site,
            )
