"""
MCP Playwright

Browser automation exposed as discrete MCP tools over one active
Playwright session.
"""

__version__ = "1.1.0"
