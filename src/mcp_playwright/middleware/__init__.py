"""FastMCP middleware for the MCP Playwright server."""

from .mcp_logging import MCPLoggingMiddleware

__all__ = ["MCPLoggingMiddleware"]
