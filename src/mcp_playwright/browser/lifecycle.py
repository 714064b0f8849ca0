"""
Lifecycle Manager

Startup begins with an empty SessionState. On SIGINT/SIGTERM every
registered session is closed best-effort (one failing close never stops
the others), the state is cleared, the Playwright driver is stopped and
the process exits with status 0.
"""

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Callable

from ..utils.logging_config import get_logger
from .launcher import BrowserLauncher
from .registry import SessionState

logger = get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _exit_process(code: int) -> None:
    logging.shutdown()
    os._exit(code)


class LifecycleManager:
    """Releases every browser session when the server stops"""

    def __init__(
        self,
        state: SessionState,
        launcher: BrowserLauncher,
        exit_func: Callable[[int], None] = _exit_process,
    ) -> None:
        self.state = state
        self.launcher = launcher
        self._exit = exit_func
        self._shutdown_task: asyncio.Task | None = None
        self._installed: list[signal.Signals] = []

    async def shutdown(self) -> list[str]:
        """
        Close all sessions, then clear the registry and the active pointer.

        Returns:
            Ids of the sessions whose browser failed to close
        """
        sessions = self.state.registry.all()
        logger.info(f"Shutting down {len(sessions)} browser session(s)")

        failed: list[str] = []
        for session_id, session in sessions:
            try:
                await session.close()
                logger.info(f"Closed browser session {session_id}")
            except Exception as e:
                failed.append(session_id)
                logger.error(f"Error closing browser session {session_id}: {e}", exc_info=True)

        self.state.clear()
        await self.launcher.stop()

        if failed:
            logger.warning(f"{len(failed)} session(s) failed to close: {', '.join(failed)}")
        return failed

    async def shutdown_and_exit(self, code: int = 0) -> None:
        try:
            await self.shutdown()
        finally:
            logger.info(f"Exiting with status {code}")
            self._exit(code)

    def _on_signal(self, signum: int) -> None:
        if self._shutdown_task is not None:
            logger.debug(f"Shutdown already in progress, ignoring signal {signum}")
            return
        logger.info(f"Received signal {signum}, cleaning up browser sessions")
        loop = asyncio.get_running_loop()
        self._shutdown_task = loop.create_task(self.shutdown_and_exit(0))

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Route SIGINT and SIGTERM to the shutdown cleanup."""
        loop = loop or asyncio.get_running_loop()

        if sys.platform != "win32":
            for sig in SHUTDOWN_SIGNALS:
                loop.add_signal_handler(sig, self._on_signal, sig)
                self._installed.append(sig)
        else:
            # Windows: no loop signal handlers, hop onto the loop from signal.signal
            def _win_shutdown(signum, frame):
                loop.call_soon_threadsafe(self._on_signal, signum)

            for sig in SHUTDOWN_SIGNALS:
                try:
                    signal.signal(sig, _win_shutdown)
                except (OSError, ValueError):
                    continue
                self._installed.append(sig)

        logger.info(f"Installed shutdown handlers for: {', '.join(s.name for s in self._installed)}")

    def remove_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        loop = loop or asyncio.get_running_loop()
        for sig in self._installed:
            if sys.platform != "win32":
                loop.remove_signal_handler(sig)
            else:
                signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()
