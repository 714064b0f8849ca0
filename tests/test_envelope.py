"""Tests for the tool outcome envelope and the error taxonomy"""

import logging

import pytest
from mcp.types import TextContent
from playwright.async_api import Error as PlaywrightError

from mcp_playwright.envelope import ToolOutcome, as_driver_error, describe_error, handles
from mcp_playwright.errors import (
    BrowserToolError,
    DriverError,
    NoActiveSession,
    UnsupportedBrowser,
    ValidationError,
)


class TestToolOutcome:
    def test_ok(self):
        outcome = ToolOutcome.ok("Element clicked")

        assert outcome.success is True
        assert outcome.blocks() == ["Element clicked"]

    def test_ok_with_payload(self):
        outcome = ToolOutcome.ok("Screenshot captured as base64:", "iVBORw0KGgo=")

        assert outcome.blocks() == ["Screenshot captured as base64:", "iVBORw0KGgo="]

    def test_error_message(self):
        outcome = ToolOutcome.error("clicking element", NoActiveSession())

        assert outcome.success is False
        assert outcome.blocks() == ["Error clicking element: No active browser session"]

    def test_to_tool_result(self):
        result = ToolOutcome.ok("first", "second").to_tool_result()

        assert len(result.content) == 2
        assert all(isinstance(block, TextContent) for block in result.content)
        assert [block.text for block in result.content] == ["first", "second"]
        assert all(block.type == "text" for block in result.content)

    def test_is_immutable(self):
        outcome = ToolOutcome.ok("done")
        with pytest.raises(AttributeError):
            outcome.message = "changed"


class TestDescribeError:
    def test_uses_tool_error_message(self):
        assert describe_error(UnsupportedBrowser("opera")) == "Unsupported browser: opera"

    def test_uses_playwright_message(self):
        assert describe_error(PlaywrightError("net::ERR_NAME_NOT_RESOLVED")) == "net::ERR_NAME_NOT_RESOLVED"

    def test_falls_back_to_class_name(self):
        assert describe_error(RuntimeError()) == "RuntimeError"

    def test_as_driver_error_keeps_taxonomy(self):
        error = ValidationError("bad")
        assert as_driver_error(error) is error

    def test_as_driver_error_wraps_cause(self):
        cause = PlaywrightError("boom")
        wrapped = as_driver_error(cause)

        assert isinstance(wrapped, DriverError)
        assert wrapped.message == "boom"
        assert wrapped.cause is cause


class TestHandles:
    """Tests for the handler boundary decorator"""

    async def test_passes_success_through(self):
        @handles("doing work")
        async def work():
            return ToolOutcome.ok("worked")

        assert await work() == ToolOutcome.ok("worked")

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (ValidationError("selector must be a non-empty string"), "selector must be a non-empty string"),
            (PlaywrightError("Timeout 50ms exceeded."), "Timeout 50ms exceeded."),
            (KeyError("missing"), "'missing'"),
            (ValueError("bad value"), "bad value"),
        ],
    )
    async def test_converts_exceptions(self, exc, expected):
        @handles("doing work")
        async def work():
            raise exc

        outcome = await work()

        assert outcome.success is False
        assert outcome.message == f"Error doing work: {expected}"

    async def test_unexpected_errors_logged_with_traceback(self, caplog):
        @handles("doing work")
        async def work():
            raise RuntimeError("kaboom")

        with caplog.at_level(logging.ERROR):
            await work()

        record = next(r for r in caplog.records if "kaboom" in r.getMessage())
        assert record.exc_info is not None

    async def test_cancellation_propagates(self):
        import asyncio

        @handles("doing work")
        async def work():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await work()

    def test_preserves_name(self):
        @handles("doing work")
        async def work():
            return ToolOutcome.ok("worked")

        assert work.__name__ == "work"


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("x"),
            UnsupportedBrowser("opera"),
            NoActiveSession(),
            DriverError("x"),
        ],
    )
    def test_all_are_tool_errors(self, error):
        assert isinstance(error, BrowserToolError)
        assert str(error) == error.message
