"""Utility modules for the MCP Playwright server."""

from .logging_config import get_logger, log_dict, log_tool_result, setup_file_logging

__all__ = ["get_logger", "log_dict", "log_tool_result", "setup_file_logging"]
