"""
Session Registry

Tracks the browser sessions owned by this server and which one is active.
A session is an exclusively owned (browser, context, page) triple; tool
calls always target the session named by the active pointer.

All state lives on a SessionState instance that the dispatcher and the
lifecycle manager receive explicitly, so tests can build isolated ones.
"""

import logging
import time
from dataclasses import dataclass

from playwright.async_api import Browser, BrowserContext, Page

from ..errors import DuplicateSession, NoActiveSession, SessionNotFound
from ..types import SessionStatus

logger = logging.getLogger(__name__)


def make_session_id(browser: str, now_ms: int | None = None) -> str:
    """Build a session id from the browser kind and a millisecond timestamp."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{browser}_{now_ms}"


@dataclass
class Session:
    """One browser automation unit"""

    id: str
    browser: Browser
    context: BrowserContext
    page: Page

    async def close(self) -> None:
        """Close the browser instance, which takes its context and page with it."""
        await self.browser.close()


class SessionRegistry:
    """Mapping from session id to its owned triple"""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def register(self, session: Session) -> None:
        """
        Add a fully built session.

        Raises:
            DuplicateSession: If the id is already registered
        """
        if session.id in self._sessions:
            raise DuplicateSession(session.id)
        self._sessions[session.id] = session
        logger.debug(f"Registered session {session.id} ({len(self)} total)")

    def get(self, session_id: str) -> Session:
        """
        Look up a session.

        Raises:
            SessionNotFound: If the id is not registered
        """
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    def remove(self, session_id: str) -> Session | None:
        """Remove a session if present; absent ids are ignored."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            logger.debug(f"Session {session_id} already removed")
        return session

    def all(self) -> list[tuple[str, Session]]:
        """Snapshot of (id, session) pairs, safe to iterate while removing."""
        return list(self._sessions.items())

    def ids(self) -> list[str]:
        return list(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()


class ActiveSessionPointer:
    """Holds at most one session id: the target of subsequent tool calls"""

    def __init__(self) -> None:
        self._session_id: str | None = None

    def set(self, session_id: str) -> None:
        self._session_id = session_id

    def get(self) -> str | None:
        return self._session_id

    def clear(self) -> None:
        self._session_id = None


class SessionState:
    """
    Session context owned by the dispatcher.

    Couples the registry with the active pointer and keeps the pointer from
    ever naming an id the registry does not hold.
    """

    def __init__(
        self,
        registry: SessionRegistry | None = None,
        pointer: ActiveSessionPointer | None = None,
    ) -> None:
        self.registry = registry or SessionRegistry()
        self.pointer = pointer or ActiveSessionPointer()

    @property
    def active_id(self) -> str | None:
        return self.pointer.get()

    def add_and_activate(self, session: Session) -> None:
        """Register a new session and make it the active one."""
        self.registry.register(session)
        self.pointer.set(session.id)
        logger.info(f"Session {session.id} is now active")

    def active_session(self) -> Session:
        """
        Resolve the session targeted by tool calls.

        Raises:
            NoActiveSession: If the pointer is empty
        """
        session_id = self.pointer.get()
        if session_id is None:
            raise NoActiveSession()
        try:
            return self.registry.get(session_id)
        except SessionNotFound:
            # The pointer must never dangle; repair and report as inactive
            logger.error(f"Active pointer referenced unknown session {session_id}, clearing it")
            self.pointer.clear()
            raise NoActiveSession() from None

    def active_page(self) -> Page:
        return self.active_session().page

    def forget(self, session_id: str) -> Session | None:
        """Remove a session, clearing the pointer if it was the active one."""
        session = self.registry.remove(session_id)
        if self.pointer.get() == session_id:
            self.pointer.clear()
        return session

    def clear(self) -> None:
        self.registry.clear()
        self.pointer.clear()

    def status(self) -> SessionStatus:
        ids = self.registry.ids()
        return {
            "active_session": self.pointer.get(),
            "session_ids": ids,
            "session_count": len(ids),
        }

    def describe(self) -> str:
        """One-line status used by the browser-status resource."""
        session_id = self.pointer.get()
        if session_id:
            return f"Active browser session: {session_id}"
        return "No active browser session"
