"""
MCP Playwright Server

Exposes Playwright browser automation as a catalog of MCP tools that all
act on a single active browser session.

This server:
1. Starts empty: no browser is launched until start_browser is called
2. Routes every tool call to the active session's page
3. Answers every call with text content blocks; failures are reported
   as "Error <action>: <reason>" messages, never as protocol errors
4. Closes every browser it launched on SIGINT/SIGTERM or shutdown
"""

import sys
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult

from .browser import (
    BrowserLauncher,
    CommandDispatcher,
    LifecycleManager,
    SessionState,
    load_server_config,
)
from .middleware import MCPLoggingMiddleware
from .types import Flag, Milliseconds, OptionsObject, SessionStatus, Text
from .utils.logging_config import get_logger, log_tool_result, parse_log_level, setup_file_logging

server_config = load_server_config()

# Configure logging using centralized utility
setup_file_logging(
    log_file=server_config["log_file"],
    level=parse_log_level(server_config["log_level"]),
)
logger = get_logger(__name__)

logger.info(f"Python interpreter: {sys.executable}")
logger.info(f"Python version: {sys.version}")

# Components created by the lifespan
session_state: SessionState | None = None
launcher: BrowserLauncher | None = None
dispatcher: CommandDispatcher | None = None
lifecycle: LifecycleManager | None = None


@asynccontextmanager
async def lifespan_context(server):
    """Lifespan context manager for startup and shutdown"""
    global session_state, launcher, dispatcher, lifecycle

    logger.info("Starting MCP Playwright server...")

    session_state = SessionState()
    launcher = BrowserLauncher()
    dispatcher = CommandDispatcher(session_state, launcher, server_config)
    lifecycle = LifecycleManager(session_state, launcher)

    try:
        lifecycle.install_signal_handlers()
    except (NotImplementedError, RuntimeError, ValueError) as e:
        logger.warning(f"Could not install signal handlers: {e}")

    logger.info("MCP Playwright server started (no active browser session)")

    try:
        yield
    finally:
        logger.info("Shutting down MCP Playwright server...")
        try:
            lifecycle.remove_signal_handlers()
        except (NotImplementedError, RuntimeError, ValueError) as e:
            logger.warning(f"Could not remove signal handlers: {e}")
        await lifecycle.shutdown()

        session_state = None
        launcher = None
        dispatcher = None
        lifecycle = None
        logger.info("MCP Playwright server shut down")


# Initialize the MCP server
mcp = FastMCP(
    name="MCP Playwright",
    instructions="""
    Browser automation through Playwright.

    Call start_browser first; every other browser tool acts on the session
    it creates. Starting another browser replaces the active session.
    Call close_session when you are done.

    Every tool answers with text. Failures are reported as messages that
    start with "Error", for example "Error clicking element: ...".
    """,
    lifespan=lifespan_context,
)

# Logs all client MCP requests and responses with "CLIENT_MCP" prefix
mcp.add_middleware(
    MCPLoggingMiddleware(log_request_params=True, log_response_data=True, max_log_length=10000)
)


def _get_dispatcher() -> CommandDispatcher:
    if dispatcher is None:
        raise RuntimeError("Command dispatcher not initialized")
    return dispatcher


# =============================================================================
# BROWSER MANAGEMENT TOOLS
# =============================================================================


@mcp.tool()
@log_tool_result(logger)
async def start_browser(browser: Text, options: OptionsObject = None) -> ToolResult:
    """
    Launch a browser and make it the active session.

    Args:
        browser: Browser to launch: 'chromium', 'firefox' or 'webkit' (Safari engine)
        options: Optional launch settings:
            headless: Run browser in headless mode (default: false)
            viewport: {width, height} in pixels
            userAgent: Custom user agent string
            userDataDir: Path to a persistent profile directory (cache, cookies, etc.)
            channel: Browser channel such as 'chrome' or 'msedge' to use a
                     system-installed browser

    Returns:
        "Browser started with session_id: <id>"
    """
    outcome = await _get_dispatcher().start_browser(browser, options)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def close_session() -> ToolResult:
    """Close the current browser session."""
    outcome = await _get_dispatcher().close_session()
    return outcome.to_tool_result()


@mcp.tool()
async def session_status() -> SessionStatus:
    """
    Report which browser session is active.

    Returns:
        active_session: Id of the active session, or null
        session_ids: Every session currently holding a browser
        session_count: Number of sessions
    """
    return _get_dispatcher().status()


# =============================================================================
# NAVIGATION TOOLS
# =============================================================================


@mcp.tool()
@log_tool_result(logger)
async def navigate(url: Text, waitUntil: Text = None) -> ToolResult:
    """
    Navigate to a URL.

    Args:
        url: URL to navigate to
        waitUntil: When to consider navigation successful: 'load' (default),
                   'domcontentloaded' or 'networkidle'
    """
    outcome = await _get_dispatcher().navigate(url, waitUntil)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def get_current_url() -> ToolResult:
    """Get the current URL of the browser."""
    outcome = await _get_dispatcher().get_current_url()
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def refresh_browser(waitTime: Milliseconds = None) -> ToolResult:
    """
    Refresh the current page and wait for content to load.

    Args:
        waitTime: Time in milliseconds to wait after refresh (default: 15000)
    """
    outcome = await _get_dispatcher().refresh_browser(waitTime)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def sleep(ms: Milliseconds = None) -> ToolResult:
    """
    Pause for a while, useful when waiting for network requests.

    Args:
        ms: Time in milliseconds to pause (default: 5000)
    """
    outcome = await _get_dispatcher().sleep(ms)
    return outcome.to_tool_result()


# =============================================================================
# ELEMENT INTERACTION TOOLS
# =============================================================================
# selector accepts CSS, text, or any other Playwright-compatible selector.
# timeout is the maximum time to wait for the element in milliseconds (default: 10000).


@mcp.tool()
@log_tool_result(logger)
async def find_element(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Wait for an element to appear.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().find_element(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def click_element(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Click an element.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().click_element(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def send_keys(selector: Text, text: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Type text into an input element, replacing its current value.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        text: Text to enter into the element
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().send_keys(selector, text, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def get_element_text(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Get the text content of an element.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().get_element_text(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def hover(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Move the mouse over an element.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().hover(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def drag_and_drop(
    selector: Text, targetSelector: Text, timeout: Milliseconds = None
) -> ToolResult:
    """
    Drag an element and drop it onto another element.

    Args:
        selector: Selector of the element to drag
        targetSelector: Selector of the drop target
        timeout: Maximum time to wait for the elements in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().drag_and_drop(selector, targetSelector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def double_click(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Double click an element.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().double_click(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def right_click(selector: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Right click (context click) an element.

    Args:
        selector: CSS selector, text selector, or other Playwright-compatible selector
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().right_click(selector, timeout)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def press_key(key: Text) -> ToolResult:
    """
    Press a keyboard key.

    Args:
        key: Key to press, e.g. 'Enter', 'Tab', 'a' or 'Control+A'
    """
    outcome = await _get_dispatcher().press_key(key)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def upload_file(selector: Text, filePath: Text, timeout: Milliseconds = None) -> ToolResult:
    """
    Set the file of a file input element.

    Args:
        selector: Selector of the <input type="file"> element
        filePath: Absolute path to the file to upload
        timeout: Maximum time to wait for element in milliseconds (default: 10000)
    """
    outcome = await _get_dispatcher().upload_file(selector, filePath, timeout)
    return outcome.to_tool_result()


# =============================================================================
# SCREENSHOT & PAGE SOURCE TOOLS
# =============================================================================


@mcp.tool()
@log_tool_result(logger)
async def take_screenshot(outputPath: Text = None, fullPage: Flag = None) -> ToolResult:
    """
    Capture a screenshot of the current page.

    Args:
        outputPath: Where to save the screenshot. A path ending in .jpg or .jpeg
                    is saved as JPEG, anything else as PNG. If omitted the PNG
                    image is returned as base64 text.
        fullPage: Capture the full scrollable page instead of the viewport (default: false)
    """
    outcome = await _get_dispatcher().take_screenshot(outputPath, fullPage)
    return outcome.to_tool_result()


@mcp.tool()
@log_tool_result(logger)
async def get_page_source(delay: Milliseconds = None) -> ToolResult:
    """
    Fetch the body HTML of the current page with all scripts removed.

    Useful for analyzing web elements and finding selectors.

    Args:
        delay: Milliseconds to wait before fetching, for SPAs and dynamic content (default: 0)
    """
    outcome = await _get_dispatcher().get_page_source(delay)
    return outcome.to_tool_result()


# =============================================================================
# RESOURCES
# =============================================================================


@mcp.resource("browser-status://current")
async def get_browser_status() -> str:
    """Get the active browser session"""
    if session_state is None:
        return "No active browser session"
    return session_state.describe()


# =============================================================================
# PROMPTS
# =============================================================================


@mcp.prompt()
def getting_started() -> str:
    """A prompt to help users get started with this MCP server."""
    return """
    Welcome to MCP Playwright!

    1. start_browser - launch chromium, firefox or webkit (required first)
    2. navigate - open a URL; get_current_url / refresh_browser / sleep
    3. find_element, click_element, double_click, right_click, hover,
       drag_and_drop, send_keys, press_key, upload_file - interact with elements
    4. get_element_text, get_page_source, take_screenshot - inspect the page
    5. close_session - close the browser when done

    Read browser-status://current or call session_status to see which
    session is active.
    """


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Run the MCP Playwright server"""
    logger.info("Initializing MCP Playwright Server...")
    mcp.run()


if __name__ == "__main__":
    main()
