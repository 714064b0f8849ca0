"""
Browser session layer

Session registry, Playwright launcher, command dispatcher and lifecycle
management for the MCP Playwright server.
"""

from .config import LaunchSettings, ServerConfig, load_server_config
from .dispatcher import CommandDispatcher
from .launcher import BrowserLauncher
from .lifecycle import LifecycleManager
from .registry import ActiveSessionPointer, Session, SessionRegistry, SessionState

__all__ = [
    "LaunchSettings",
    "ServerConfig",
    "load_server_config",
    "CommandDispatcher",
    "BrowserLauncher",
    "LifecycleManager",
    "ActiveSessionPointer",
    "Session",
    "SessionRegistry",
    "SessionState",
]
