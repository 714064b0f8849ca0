"""
Result Envelope

Every tool answers with the same shape: an ordered list of text content
blocks. Success and failure differ only in the message text; failures read
``Error <action>: <reason>`` and never surface as protocol-level errors.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from playwright.async_api import Error as PlaywrightError

from .errors import BrowserToolError, DriverError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolOutcome:
    """
    Tagged outcome of a single tool invocation.

    Attributes:
        success: Discriminant between the success and failure variants
        message: The confirmatory text, or ``Error <action>: <reason>``
        extra: Payload blocks that follow the message (base64 screenshots only)
    """

    success: bool
    message: str
    extra: tuple[str, ...] = ()

    @classmethod
    def ok(cls, message: str, *extra: str) -> "ToolOutcome":
        return cls(success=True, message=message, extra=tuple(extra))

    @classmethod
    def error(cls, action: str, exc: BaseException) -> "ToolOutcome":
        return cls(success=False, message=f"Error {action}: {describe_error(exc)}")

    def blocks(self) -> list[str]:
        return [self.message, *self.extra]

    def to_tool_result(self) -> ToolResult:
        """Render as the MCP content blocks returned to the transport."""
        return ToolResult(content=[TextContent(type="text", text=text) for text in self.blocks()])


def describe_error(exc: BaseException) -> str:
    """Human-readable reason for an exception raised inside a handler."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


def as_driver_error(exc: Exception) -> BrowserToolError:
    """Wrap anything that is not already part of the tool error taxonomy."""
    if isinstance(exc, BrowserToolError):
        return exc
    return DriverError(describe_error(exc), cause=exc)


def handles(
    action: str,
) -> Callable[[Callable[..., Awaitable[ToolOutcome]]], Callable[..., Awaitable[ToolOutcome]]]:
    """
    Decorator placing a handler boundary around a dispatcher coroutine.

    Any exception raised by the wrapped coroutine is converted into a failure
    ``ToolOutcome`` whose message is prefixed with ``action``. Cancellation
    is left alone.

    Args:
        action: Gerund phrase describing the operation, e.g. "clicking element"
    """

    def decorator(func: Callable[..., Awaitable[ToolOutcome]]) -> Callable[..., Awaitable[ToolOutcome]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> ToolOutcome:
            try:
                return await func(*args, **kwargs)
            except BrowserToolError as e:
                logger.warning(f"{func.__name__} failed ({e.__class__.__name__}): {e.message}")
                return ToolOutcome.error(action, e)
            except PlaywrightError as e:
                logger.warning(f"{func.__name__} failed (driver): {describe_error(e)}")
                return ToolOutcome.error(action, as_driver_error(e))
            except Exception as e:
                logger.error(f"{func.__name__} failed unexpectedly: {e}", exc_info=True)
                return ToolOutcome.error(action, as_driver_error(e))

        return wrapper

    return decorator
