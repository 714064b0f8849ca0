"""
Browser launcher

Owns the Playwright driver handle and turns a browser kind plus launch
settings into a complete Session. The driver is started lazily on the
first launch and stopped when the server shuts down.
"""

from collections.abc import Callable
from typing import Any

from playwright.async_api import Playwright, async_playwright

from ..utils.logging_config import get_logger, log_dict
from .config import LaunchSettings, validate_browser_kind
from .registry import Session, make_session_id

logger = get_logger(__name__)


class BrowserLauncher:
    """Creates (browser, context, page) triples through Playwright"""

    def __init__(self, playwright_factory: Callable[[], Any] = async_playwright) -> None:
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None

    @property
    def is_started(self) -> bool:
        return self._playwright is not None

    async def _driver(self) -> Playwright:
        if self._playwright is None:
            logger.info("Starting Playwright driver...")
            self._playwright = await self._playwright_factory().start()
            logger.info("Playwright driver started")
        return self._playwright

    async def create_session(self, browser: str, settings: LaunchSettings) -> Session:
        """
        Launch a browser and open a context and page in it.

        The triple is built atomically: if the context or page cannot be
        created the browser is closed again and the error is re-raised.

        Args:
            browser: "chromium", "firefox" or "webkit"
            settings: Normalized launch settings

        Returns:
            A Session that has not been registered yet

        Raises:
            UnsupportedBrowser: If browser is not a supported kind
        """
        browser = validate_browser_kind(browser)
        launch_kwargs = settings.launch_kwargs()
        context_kwargs = settings.context_kwargs()

        log_dict(logger, f"Launching {browser} with:", launch_kwargs)
        driver = await self._driver()
        browser_instance = await getattr(driver, browser).launch(**launch_kwargs)

        try:
            context = await browser_instance.new_context(**context_kwargs)
            page = await context.new_page()
        except Exception:
            logger.warning(f"Context/page creation failed for {browser}, closing browser")
            await self._close_quietly(browser_instance)
            raise

        session = Session(
            id=make_session_id(browser),
            browser=browser_instance,
            context=context,
            page=page,
        )
        logger.info(f"Created session {session.id}")
        return session

    async def discard(self, session: Session) -> None:
        """Close a session that could not be registered."""
        await self._close_quietly(session.browser)

    async def _close_quietly(self, browser_instance: Any) -> None:
        try:
            await browser_instance.close()
        except Exception as e:
            logger.error(f"Error closing browser during rollback: {e}", exc_info=True)

    async def stop(self) -> None:
        """Stop the Playwright driver if it was started."""
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
            logger.info("Playwright driver stopped")
        except Exception as e:
            logger.error(f"Error stopping Playwright driver: {e}", exc_info=True)
        finally:
            self._playwright = None
