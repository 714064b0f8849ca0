"""
Pytest Configuration and Fixtures

This module provides shared fixtures for all tests. Playwright objects are
replaced by AsyncMock stand-ins so the session layer can be tested without
launching a browser.
"""

import itertools
from unittest.mock import AsyncMock, Mock

import pytest

from mcp_playwright.browser.config import ServerConfig
from mcp_playwright.browser.dispatcher import CommandDispatcher
from mcp_playwright.browser.registry import Session, SessionState

# Import browser fixtures to make them available to all tests
from tests.fixtures.browser_fixture import browser_setup  # noqa: F401

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def build_mock_page(url: str = "about:blank") -> AsyncMock:
    """Create a mock Playwright Page whose driver calls all succeed."""
    page = AsyncMock()
    page.url = url
    page.screenshot = AsyncMock(return_value=PNG_SIGNATURE + b"fake-image-data")
    page.text_content = AsyncMock(return_value="Hello")
    page.evaluate = AsyncMock(return_value="<body><p>Hello</p></body>")
    return page


@pytest.fixture
def mock_page() -> AsyncMock:
    """Provide a mock Playwright page."""
    return build_mock_page()


@pytest.fixture
def make_session():
    """Factory building sessions out of mock browser/context/page objects."""

    def _make(session_id: str = "chromium_1700000000000", page: AsyncMock | None = None) -> Session:
        return Session(
            id=session_id,
            browser=AsyncMock(),
            context=AsyncMock(),
            page=page or build_mock_page(),
        )

    return _make


@pytest.fixture
def session_state() -> SessionState:
    """Provide a fresh, empty session state."""
    return SessionState()


@pytest.fixture
def mock_launcher(make_session):
    """
    Create a mock BrowserLauncher.

    create_session() hands out sessions with increasing timestamp ids.
    """
    counter = itertools.count(1700000000001)
    launcher = Mock()
    launcher.create_session = AsyncMock(
        side_effect=lambda browser, settings: make_session(f"{browser}_{next(counter)}")
    )
    launcher.discard = AsyncMock()
    launcher.stop = AsyncMock()
    return launcher


@pytest.fixture
def server_config() -> ServerConfig:
    """Provide a server configuration with defaults."""
    return {
        "default_headless": False,
        "replace_active_session": True,
        "log_file": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def dispatcher(session_state, mock_launcher, server_config) -> CommandDispatcher:
    """Provide a dispatcher wired to a fresh state and a mock launcher."""
    return CommandDispatcher(session_state, mock_launcher, server_config)


@pytest.fixture
def active_session(session_state, make_session) -> Session:
    """Register a session and make it active."""
    session = make_session()
    session_state.add_and_activate(session)
    return session
