"""
Type Definitions

TypedDict classes for the option objects accepted by the browser tools.
Field names follow the tool schema (camelCase) rather than Python style.
"""

from typing import Annotated, Any, TypedDict

from pydantic import WithJsonSchema


class ViewportOptions(TypedDict, total=False):
    """Viewport size in CSS pixels."""

    width: int
    height: int


class BrowserOptions(TypedDict, total=False):
    """
    Options for start_browser.

    Every field is optional; an omitted or null options object is the same
    as ``{}``.
    """

    headless: bool  # Run browser in headless mode (default: false)
    viewport: ViewportOptions  # Viewport size (default: browser default)
    userAgent: str  # Custom user agent string
    userDataDir: str  # Persistent profile directory, passed as --user-data-dir
    channel: str  # System-installed browser build, e.g. "chrome" or "msedge"


class SessionStatus(TypedDict):
    """Snapshot of the session registry for status reporting."""

    active_session: str | None
    session_ids: list[str]
    session_count: int


# Tool parameter annotations. Each advertises the expected JSON type in the
# tool schema but accepts any value; the dispatcher checks it and reports
# bad values as "Error <action>: ..." results.
Text = Annotated[Any, WithJsonSchema({"type": "string"})]
Milliseconds = Annotated[Any, WithJsonSchema({"type": "number", "minimum": 0})]
Flag = Annotated[Any, WithJsonSchema({"type": "boolean"})]
OptionsObject = Annotated[
    Any,
    WithJsonSchema(
        {
            "type": "object",
            "properties": {
                "headless": {"type": "boolean"},
                "viewport": {
                    "type": "object",
                    "properties": {
                        "width": {"type": "integer"},
                        "height": {"type": "integer"},
                    },
                },
                "userAgent": {"type": "string"},
                "userDataDir": {"type": "string"},
                "channel": {"type": "string"},
            },
        }
    ),
]
