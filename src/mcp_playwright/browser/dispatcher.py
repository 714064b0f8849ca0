"""
Command Dispatcher

One coroutine per tool. Each handler validates its parameters and applies
defaults, resolves the active page through the SessionState, calls the
matching Playwright operation and answers with a ToolOutcome. Failures of
any kind become failure outcomes at the @handles boundary.
"""

import base64
from typing import Any

from ..envelope import ToolOutcome, handles
from ..errors import ValidationError
from ..types import BrowserOptions, SessionStatus
from ..utils.logging_config import get_logger
from .config import (
    DEFAULT_REFRESH_WAIT_MS,
    DEFAULT_SLEEP_MS,
    DEFAULT_TIMEOUT_MS,
    WAIT_UNTIL_STATES,
    LaunchSettings,
    ServerConfig,
    load_server_config,
    validate_browser_kind,
)
from .launcher import BrowserLauncher
from .registry import SessionState

logger = get_logger(__name__)

# Serializes the body without executable code: clone, drop every <script>, return markup
PAGE_SOURCE_SCRIPT = """() => {
    const body = document.body.cloneNode(true);
    body.querySelectorAll("script").forEach((script) => script.remove());
    return body.outerHTML;
}"""


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} must be a non-empty string")
    return value


def _require_string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    return value


def _duration(name: str, value: Any, default: int | float) -> int | float:
    """Milliseconds value with a default; must be a non-negative number."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number of milliseconds")
    if value < 0:
        raise ValidationError(f"{name} must be >= 0")
    return value


def _flag(name: str, value: Any, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be a boolean")
    return value


def screenshot_type(output_path: str | None) -> str:
    """Pick the image encoding from the output path extension, PNG by default."""
    if output_path and output_path.lower().endswith((".jpg", ".jpeg")):
        return "jpeg"
    return "png"


class CommandDispatcher:
    """Routes tool invocations to the active session's page"""

    def __init__(
        self,
        state: SessionState,
        launcher: BrowserLauncher,
        config: ServerConfig | None = None,
    ) -> None:
        self.state = state
        self.launcher = launcher
        self.config = config or load_server_config()

    # =========================================================================
    # BROWSER MANAGEMENT
    # =========================================================================

    @handles("starting browser")
    async def start_browser(
        self, browser: str, options: BrowserOptions | dict[str, Any] | None = None
    ) -> ToolOutcome:
        browser = validate_browser_kind(browser)
        settings = LaunchSettings.from_options(options, self.config["default_headless"])

        session = await self.launcher.create_session(browser, settings)

        if self.config["replace_active_session"] and self.state.active_id:
            await self._retire_active_session()

        try:
            self.state.add_and_activate(session)
        except Exception:
            await self.launcher.discard(session)
            raise

        return ToolOutcome.ok(f"Browser started with session_id: {session.id}")

    async def _retire_active_session(self) -> None:
        """Close the session a new start_browser call is replacing."""
        previous = self.state.active_session()
        logger.info(f"Closing previous session {previous.id} before starting a new one")
        try:
            await previous.close()
        except Exception as e:
            logger.error(f"Error closing previous session {previous.id}: {e}", exc_info=True)
        finally:
            self.state.forget(previous.id)

    @handles("closing session")
    async def close_session(self) -> ToolOutcome:
        session = self.state.active_session()
        try:
            await session.close()
        finally:
            self.state.forget(session.id)
        logger.info(f"Session {session.id} closed")
        return ToolOutcome.ok(f"Browser session {session.id} closed")

    def status(self) -> SessionStatus:
        return self.state.status()

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    @handles("navigating")
    async def navigate(self, url: str, wait_until: str | None = None) -> ToolOutcome:
        url = _require_text("url", url)
        wait_until = wait_until or "load"
        if wait_until not in WAIT_UNTIL_STATES:
            raise ValidationError(f"waitUntil must be one of: {', '.join(WAIT_UNTIL_STATES)}")

        page = self.state.active_page()
        await page.goto(url, wait_until=wait_until)
        return ToolOutcome.ok(f"Navigated to {url}")

    @handles("getting current URL")
    async def get_current_url(self) -> ToolOutcome:
        page = self.state.active_page()
        return ToolOutcome.ok(page.url)

    @handles("refreshing page")
    async def refresh_browser(self, wait_time: int | float | None = None) -> ToolOutcome:
        wait_time = _duration("waitTime", wait_time, DEFAULT_REFRESH_WAIT_MS)

        page = self.state.active_page()
        await page.reload()
        if wait_time > 0:
            await page.wait_for_timeout(wait_time)
        return ToolOutcome.ok(f"Page refreshed and waited {wait_time}ms for content to load")

    @handles("sleeping")
    async def sleep(self, ms: int | float | None = None) -> ToolOutcome:
        ms = _duration("ms", ms, DEFAULT_SLEEP_MS)

        page = self.state.active_page()
        if ms > 0:
            await page.wait_for_timeout(ms)
        return ToolOutcome.ok(f"Slept for {ms}ms")

    # =========================================================================
    # ELEMENT INTERACTION
    # =========================================================================

    @handles("finding element")
    async def find_element(self, selector: str, timeout: int | float | None = None) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.wait_for_selector(selector, timeout=timeout)
        return ToolOutcome.ok("Element found")

    @handles("clicking element")
    async def click_element(self, selector: str, timeout: int | float | None = None) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.click(selector, timeout=timeout)
        return ToolOutcome.ok("Element clicked")

    @handles("entering text")
    async def send_keys(
        self, selector: str, text: str, timeout: int | float | None = None
    ) -> ToolOutcome:
        selector = _require_text("selector", selector)
        text = _require_string("text", text)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.fill(selector, text, timeout=timeout)
        return ToolOutcome.ok(f'Text "{text}" entered into element')

    @handles("getting element text")
    async def get_element_text(
        self, selector: str, timeout: int | float | None = None
    ) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        text = await page.text_content(selector, timeout=timeout)
        return ToolOutcome.ok(text or "")

    @handles("hovering over element")
    async def hover(self, selector: str, timeout: int | float | None = None) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.hover(selector, timeout=timeout)
        return ToolOutcome.ok("Hovered over element")

    @handles("performing drag and drop")
    async def drag_and_drop(
        self, selector: str, target_selector: str, timeout: int | float | None = None
    ) -> ToolOutcome:
        selector = _require_text("selector", selector)
        target_selector = _require_text("targetSelector", target_selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.drag_and_drop(selector, target_selector, timeout=timeout)
        return ToolOutcome.ok("Drag and drop completed")

    @handles("performing double click")
    async def double_click(self, selector: str, timeout: int | float | None = None) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.dblclick(selector, timeout=timeout)
        return ToolOutcome.ok("Double click performed")

    @handles("performing right click")
    async def right_click(self, selector: str, timeout: int | float | None = None) -> ToolOutcome:
        selector = _require_text("selector", selector)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.click(selector, button="right", timeout=timeout)
        return ToolOutcome.ok("Right click performed")

    @handles("pressing key")
    async def press_key(self, key: str) -> ToolOutcome:
        key = _require_text("key", key)

        page = self.state.active_page()
        await page.keyboard.press(key)
        return ToolOutcome.ok(f"Key '{key}' pressed")

    @handles("uploading file")
    async def upload_file(
        self, selector: str, file_path: str, timeout: int | float | None = None
    ) -> ToolOutcome:
        selector = _require_text("selector", selector)
        file_path = _require_text("filePath", file_path)
        timeout = _duration("timeout", timeout, DEFAULT_TIMEOUT_MS)

        page = self.state.active_page()
        await page.set_input_files(selector, file_path, timeout=timeout)
        return ToolOutcome.ok("File upload initiated")

    # =========================================================================
    # CAPTURE & INSPECTION
    # =========================================================================

    @handles("taking screenshot")
    async def take_screenshot(
        self, output_path: str | None = None, full_page: bool | None = None
    ) -> ToolOutcome:
        if output_path == "":
            output_path = None
        if output_path is not None:
            output_path = _require_string("outputPath", output_path)
        full_page = _flag("fullPage", full_page, False)

        page = self.state.active_page()
        kwargs: dict[str, Any] = {"full_page": full_page, "type": screenshot_type(output_path)}
        if output_path:
            kwargs["path"] = output_path
        image = await page.screenshot(**kwargs)

        if output_path:
            return ToolOutcome.ok(f"Screenshot saved to {output_path}")
        return ToolOutcome.ok(
            "Screenshot captured as base64:", base64.b64encode(image).decode("ascii")
        )

    @handles("getting page source")
    async def get_page_source(self, delay: int | float | None = None) -> ToolOutcome:
        delay = _duration("delay", delay, 0)

        page = self.state.active_page()
        if delay > 0:
            await page.wait_for_timeout(delay)
        body_source = await page.evaluate(PAGE_SOURCE_SCRIPT)
        return ToolOutcome.ok(body_source)
