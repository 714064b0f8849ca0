"""
Logging configuration utilities for mcp-playwright

Provides file-only logging configuration to prevent MCP protocol corruption.
The MCP protocol uses stdout for JSON-RPC communication, so all logging must
go exclusively to files.
"""

import json
import logging
import tempfile
from collections.abc import Awaitable, Callable
from functools import wraps
from pathlib import Path
from typing import Any

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def parse_log_level(name: str | None, default: int = logging.INFO) -> int:
    """Translate a level name such as "debug" into a logging level constant."""
    if not name:
        return default
    return _LEVELS.get(name.strip().upper(), default)


def setup_file_logging(
    log_file: str | Path = "logs/mcp-playwright.log",
    level: int = logging.INFO,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure file-only logging for the application.

    NOTE: We log ONLY to file, NOT to stdout/stderr, because stdout is used
    for MCP protocol communication with the client (FastMCP uses stdio transport).

    Args:
        log_file: Path to the log file (relative or absolute)
        level: Logging level (default: logging.INFO)
        format_string: Custom format string (default: timestamp - name - level - message)

    Returns:
        The root logger instance
    """
    log_path = Path(log_file)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    except (OSError, PermissionError):
        # Unwritable location (read-only install dir, etc.): use the temp dir instead
        log_path = Path(tempfile.gettempdir()) / log_path.name
        handler = logging.FileHandler(log_path)

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[handler],
        force=True,
    )

    logger = logging.getLogger()
    logger.info(f"Logging configured: file={log_path}, level={logging.getLevelName(level)}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_dict(
    logger: logging.Logger, message: str, data: dict[str, Any], level: int = logging.INFO
) -> None:
    """
    Log a dictionary with formatted key-value pairs.

    Args:
        logger: Logger instance
        message: Prefix message
        data: Dictionary to log
        level: Log level (default: INFO)
    """
    logger.log(level, message)
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in ["token", "password", "secret", "key"]):
            value = "***REDACTED***"
        logger.log(level, f"  {key}: {value}")


def loggable_result(result: Any, max_block_length: int = 1000) -> Any:
    """Reduce a tool result to plain data, shortening long content blocks."""
    if isinstance(result, dict):
        content = result.get("content")
    else:
        content = getattr(result, "content", None)
    if not isinstance(content, list):
        return result
    texts = []
    for block in content:
        if isinstance(block, dict):
            text = block.get("text")
        else:
            text = getattr(block, "text", None)
        if text is None:
            text = str(block)
        if len(text) > max_block_length:
            text = f"{text[:max_block_length]}... ({len(text)} chars total)"
        texts.append(text)
    return {"content": texts}


def _serialize_result(result: Any) -> str:
    result = loggable_result(result)
    try:
        return json.dumps(result, default=str)
    except (TypeError, ValueError):
        return str(result)


def log_tool_result(
    logger: logging.Logger | None = None,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """
    Decorator that logs the value returned by an async tool function.

    The result is logged as ``TOOL_RESULT [<function name>]: <json>`` and
    returned unchanged. Exceptions raised by the tool propagate untouched.

    Args:
        logger: Logger to write to (default: the decorated function's module logger)
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        tool_logger = logger or logging.getLogger(func.__module__)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)
            tool_logger.info(f"TOOL_RESULT [{func.__name__}]: {_serialize_result(result)}")
            return result

        return wrapper

    return decorator
