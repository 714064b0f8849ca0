"""Custom exceptions for mcp-playwright."""


class BrowserToolError(Exception):
    """Base exception for failures reported by browser tools."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BrowserToolError):
    """Malformed or missing tool parameters."""

    pass


class UnsupportedBrowser(BrowserToolError):
    """Requested browser kind is not chromium, firefox or webkit."""

    def __init__(self, browser: str):
        self.browser = browser
        super().__init__(f"Unsupported browser: {browser}")


class NoActiveSession(BrowserToolError):
    """A page operation was requested while no session is active."""

    def __init__(self, message: str = "No active browser session"):
        super().__init__(message)


class SessionNotFound(BrowserToolError):
    """Session id is not present in the registry."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Browser session not found: {session_id}")


class DuplicateSession(BrowserToolError):
    """Session id is already registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Browser session already exists: {session_id}")


class DriverError(BrowserToolError):
    """Failure surfaced by the Playwright driver."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)
