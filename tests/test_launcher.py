"""
Tests for the browser launcher

The Playwright driver is replaced by a fake factory so no browser binaries
are needed.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from mcp_playwright.browser.config import LaunchSettings
from mcp_playwright.browser.launcher import BrowserLauncher
from mcp_playwright.errors import UnsupportedBrowser


@pytest.fixture
def fake_driver():
    """Create a fake Playwright driver with chromium/firefox/webkit types."""
    driver = MagicMock()
    driver.stop = AsyncMock()
    for kind in ("chromium", "firefox", "webkit"):
        page = AsyncMock(name=f"{kind}_page")
        context = AsyncMock(name=f"{kind}_context")
        context.new_page = AsyncMock(return_value=page)
        browser = AsyncMock(name=f"{kind}_browser")
        browser.new_context = AsyncMock(return_value=context)
        browser_type = MagicMock()
        browser_type.launch = AsyncMock(return_value=browser)
        setattr(driver, kind, browser_type)
    return driver


@pytest.fixture
def playwright_factory(fake_driver):
    """Stand-in for async_playwright(): returns an object with start()."""
    manager = MagicMock()
    manager.start = AsyncMock(return_value=fake_driver)
    return MagicMock(return_value=manager)


@pytest.fixture
def launcher(playwright_factory):
    return BrowserLauncher(playwright_factory=playwright_factory)


class TestCreateSession:
    """Tests for BrowserLauncher.create_session"""

    async def test_builds_triple(self, launcher, fake_driver):
        session = await launcher.create_session("firefox", LaunchSettings())

        browser = fake_driver.firefox.launch.return_value
        context = browser.new_context.return_value
        assert session.browser is browser
        assert session.context is context
        assert session.page is context.new_page.return_value
        assert session.id.startswith("firefox_")
        fake_driver.firefox.launch.assert_awaited_once_with(headless=False)
        browser.new_context.assert_awaited_once_with()

    async def test_passes_settings(self, launcher, fake_driver):
        settings = LaunchSettings(
            headless=True,
            viewport={"width": 800, "height": 600},
            user_agent="Agent/2",
            user_data_dir="/tmp/p",
            channel="chrome",
        )

        await launcher.create_session("chromium", settings)

        fake_driver.chromium.launch.assert_awaited_once_with(
            headless=True, args=["--user-data-dir=/tmp/p"], channel="chrome"
        )
        browser = fake_driver.chromium.launch.return_value
        browser.new_context.assert_awaited_once_with(
            viewport={"width": 800, "height": 600}, user_agent="Agent/2"
        )

    async def test_driver_started_once(self, launcher, playwright_factory):
        assert launcher.is_started is False

        await launcher.create_session("chromium", LaunchSettings())
        await launcher.create_session("webkit", LaunchSettings())

        assert launcher.is_started is True
        playwright_factory.assert_called_once()

    async def test_rejects_unsupported_browser(self, launcher, playwright_factory):
        with pytest.raises(UnsupportedBrowser):
            await launcher.create_session("opera", LaunchSettings())

        playwright_factory.assert_not_called()

    async def test_launch_failure_propagates(self, launcher, fake_driver):
        fake_driver.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with pytest.raises(PlaywrightError, match="Executable"):
            await launcher.create_session("chromium", LaunchSettings())

    async def test_context_failure_closes_browser(self, launcher, fake_driver):
        browser = fake_driver.chromium.launch.return_value
        browser.new_context.side_effect = PlaywrightError("context failed")

        with pytest.raises(PlaywrightError, match="context failed"):
            await launcher.create_session("chromium", LaunchSettings())

        browser.close.assert_awaited_once()

    async def test_page_failure_closes_browser_even_if_close_fails(self, launcher, fake_driver):
        browser = fake_driver.webkit.launch.return_value
        context = browser.new_context.return_value
        context.new_page.side_effect = PlaywrightError("page failed")
        browser.close.side_effect = PlaywrightError("close failed")

        with pytest.raises(PlaywrightError, match="page failed"):
            await launcher.create_session("webkit", LaunchSettings())

        browser.close.assert_awaited_once()


class TestDiscardAndStop:
    async def test_discard_closes_browser(self, launcher, make_session):
        session = make_session()
        session.browser.close.side_effect = PlaywrightError("already closed")

        await launcher.discard(session)

        session.browser.close.assert_awaited_once()

    async def test_stop_before_start_is_noop(self, launcher, playwright_factory):
        await launcher.stop()

        playwright_factory.assert_not_called()
        assert launcher.is_started is False

    async def test_stop_stops_driver(self, launcher, fake_driver):
        await launcher.create_session("chromium", LaunchSettings())

        await launcher.stop()

        fake_driver.stop.assert_awaited_once()
        assert launcher.is_started is False

    async def test_stop_tolerates_driver_errors(self, launcher, fake_driver):
        await launcher.create_session("chromium", LaunchSettings())
        fake_driver.stop.side_effect = RuntimeError("driver gone")

        await launcher.stop()

        assert launcher.is_started is False
