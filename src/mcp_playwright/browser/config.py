"""
Configuration management for MCP Playwright

Loads server configuration from environment variables with sensible
defaults, and normalizes the per-call start_browser options into the
keyword arguments handed to Playwright.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

from dotenv import load_dotenv

from ..errors import UnsupportedBrowser, ValidationError
from ..types import BrowserOptions

logger = logging.getLogger(__name__)

# Load environment variables from .env file
# Try multiple paths for .env file
env_loaded = False
for env_path in [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent.parent / ".env",
    Path.home() / ".env",
]:
    if env_path.exists():
        logger.info(f"Loading environment from: {env_path}")
        load_dotenv(env_path)
        env_loaded = True
        break

if not env_loaded:
    logger.debug("No .env file found, using system environment variables only")

ENV_PREFIX = "MCP_PLAYWRIGHT_"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
WAIT_UNTIL_STATES = ("load", "domcontentloaded", "networkidle")

# Playwright's own default viewport, used to complete a half-specified viewport
DEFAULT_VIEWPORT = {"width": 1280, "height": 720}

DEFAULT_TIMEOUT_MS = 10000
DEFAULT_REFRESH_WAIT_MS = 15000
DEFAULT_SLEEP_MS = 5000


class ServerConfig(TypedDict):
    """Process-wide configuration for the MCP server"""

    default_headless: bool
    replace_active_session: bool
    log_file: str
    log_level: str


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def load_server_config() -> ServerConfig:
    """
    Load server configuration from MCP_PLAYWRIGHT_* environment variables.

    Returns:
        ServerConfig with all settings
    """
    return {
        "default_headless": _get_bool_env(f"{ENV_PREFIX}HEADLESS", False),
        "replace_active_session": _get_bool_env(f"{ENV_PREFIX}REPLACE_ACTIVE_SESSION", True),
        "log_file": os.getenv(f"{ENV_PREFIX}LOG_FILE", "logs/mcp-playwright.log"),
        "log_level": os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
    }


def validate_browser_kind(browser: Any) -> str:
    """
    Check that the requested browser is one Playwright can launch.

    Raises:
        UnsupportedBrowser: If browser is not chromium, firefox or webkit
    """
    if browser not in SUPPORTED_BROWSERS:
        raise UnsupportedBrowser(str(browser))
    return browser


def _optional_str(options: dict[str, Any], key: str) -> str | None:
    value = options.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"options.{key} must be a string")
    return value


def _normalize_viewport(viewport: Any) -> dict[str, int] | None:
    if viewport is None:
        return None
    if not isinstance(viewport, dict):
        raise ValidationError("options.viewport must be an object with width and height")
    if not viewport:
        return None

    normalized = dict(DEFAULT_VIEWPORT)
    for side in ("width", "height"):
        value = viewport.get(side)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"options.viewport.{side} must be a number")
        if value <= 0 or int(value) != value:
            raise ValidationError(f"options.viewport.{side} must be a positive integer")
        normalized[side] = int(value)
    return normalized


@dataclass(frozen=True)
class LaunchSettings:
    """
    Normalized start_browser options.

    Attributes:
        headless: Run without a visible window (default: False, or
            MCP_PLAYWRIGHT_HEADLESS)
        viewport: Context viewport (default: None, the browser default)
        user_agent: Context user agent override (default: None)
        user_data_dir: Profile directory passed as --user-data-dir (default: None)
        channel: System browser channel such as "chrome" (default: None)
    """

    headless: bool = False
    viewport: dict[str, int] | None = None
    user_agent: str | None = None
    user_data_dir: str | None = None
    channel: str | None = None

    @classmethod
    def from_options(
        cls, options: BrowserOptions | dict[str, Any] | None, default_headless: bool = False
    ) -> "LaunchSettings":
        """
        Build settings from a caller-supplied options object.

        ``None`` and ``{}`` are equivalent and yield all defaults.

        Raises:
            ValidationError: If any option has the wrong type or range
        """
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise ValidationError("options must be an object")

        headless = options.get("headless")
        if headless is None:
            headless = default_headless
        elif not isinstance(headless, bool):
            raise ValidationError("options.headless must be a boolean")

        return cls(
            headless=headless,
            viewport=_normalize_viewport(options.get("viewport")),
            user_agent=_optional_str(options, "userAgent"),
            user_data_dir=_optional_str(options, "userDataDir"),
            channel=_optional_str(options, "channel"),
        )

    def launch_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        kwargs: dict[str, Any] = {"headless": self.headless}
        if self.user_data_dir:
            kwargs["args"] = [f"--user-data-dir={self.user_data_dir}"]
        if self.channel:
            kwargs["channel"] = self.channel
        return kwargs

    def context_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``Browser.new_context``."""
        kwargs: dict[str, Any] = {}
        if self.viewport:
            kwargs["viewport"] = dict(self.viewport)
        if self.user_agent:
            kwargs["user_agent"] = self.user_agent
        return kwargs
