"""
MCP request/response logging middleware

Logs every client request reaching the server with a ``CLIENT_MCP`` prefix
so the traffic can be filtered out of the log file easily:

    CLIENT_MCP → <request>      incoming
    CLIENT_MCP ← <result>       completed, with elapsed time
    CLIENT_MCP ✗ <error>        failed
"""

import json
import time
from typing import Any

from fastmcp.server.middleware import Middleware, MiddlewareContext

from ..utils.logging_config import get_logger, loggable_result

logger = get_logger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class MCPLoggingMiddleware(Middleware):
    """Logs initialization, listings, tool calls, resource reads and prompts"""

    def __init__(
        self,
        log_request_params: bool = True,
        log_response_data: bool = False,
        max_log_length: int = 5000,
    ):
        """
        Args:
            log_request_params: Log tool and prompt arguments
            log_response_data: Log tool and resource results
            max_log_length: Truncate logged payloads beyond this many characters
        """
        self.log_request_params = log_request_params
        self.log_response_data = log_response_data
        self.max_log_length = max_log_length

    def _truncate_data(self, data: Any, max_length: int | None = None) -> str:
        """Serialize data for the log, cutting it at max_length characters."""
        if max_length is None:
            max_length = self.max_log_length
        try:
            text = json.dumps(loggable_result(data), default=str, indent=2)
        except (TypeError, ValueError):
            text = str(data)
        if len(text) > max_length:
            return f"{text[:max_length]}... ({len(text)} chars total)"
        return text

    def _log_arguments(self, name: str, arguments: dict[str, Any] | None) -> None:
        if not arguments:
            logger.info(f"CLIENT_MCP   Tool '{name}' arguments: (none)")
            return
        logger.info(f"CLIENT_MCP   Tool '{name}' arguments: {self._truncate_data(arguments)}")

    def _log_result(self, name: str, result: Any) -> None:
        logger.info(f"CLIENT_MCP   Tool '{name}' result: {self._truncate_data(result)}")

    async def on_initialize(self, context: MiddlewareContext, call_next):
        params = getattr(context.message, "params", None)
        client_info = getattr(params, "clientInfo", None) if params is not None else None
        client_name = getattr(client_info, "name", None) or "unknown"
        client_version = getattr(client_info, "version", None) or "unknown"
        protocol = getattr(params, "protocolVersion", None) if params is not None else None
        logger.info(
            f"CLIENT_MCP → Initialize: {client_name} v{client_version} "
            f"(protocol: {protocol or 'unknown'})"
        )

        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(f"CLIENT_MCP ✗ Initialize error: {e.__class__.__name__}: {e}")
            raise

        logger.info(f"CLIENT_MCP ← Initialize complete ({_elapsed_ms(start):.1f}ms)")
        return result

    async def on_list_tools(self, context: MiddlewareContext, call_next):
        return await self._log_listing("tools", context, call_next)

    async def on_list_resources(self, context: MiddlewareContext, call_next):
        return await self._log_listing("resources", context, call_next)

    async def on_list_prompts(self, context: MiddlewareContext, call_next):
        return await self._log_listing("prompts", context, call_next)

    async def _log_listing(self, kind: str, context: MiddlewareContext, call_next):
        logger.info(f"CLIENT_MCP → List {kind}")
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(f"CLIENT_MCP ✗ List {kind} error: {e.__class__.__name__}: {e}")
            raise

        count = len(result) if result else 0
        logger.info(f"CLIENT_MCP ← List {kind} result: {count} {kind}")
        return result

    async def on_call_tool(self, context: MiddlewareContext, call_next):
        name = getattr(context.message, "name", "unknown")
        logger.info(f"CLIENT_MCP → Tool call: {name}")
        if self.log_request_params:
            self._log_arguments(name, getattr(context.message, "arguments", None))

        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(f"CLIENT_MCP ✗ Tool error: {name} ({_elapsed_ms(start):.1f}ms)")
            logger.error(f"CLIENT_MCP   {e.__class__.__name__}: {e}")
            raise

        logger.info(f"CLIENT_MCP ← Tool result: {name} ({_elapsed_ms(start):.1f}ms)")
        if self.log_response_data:
            self._log_result(name, result)
        return result

    async def on_read_resource(self, context: MiddlewareContext, call_next):
        uri = getattr(context.message, "uri", "unknown")
        logger.info(f"CLIENT_MCP → Resource read: {uri}")

        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(f"CLIENT_MCP ✗ Resource error: {uri}")
            logger.error(f"CLIENT_MCP   {e.__class__.__name__}: {e}")
            raise

        logger.info(f"CLIENT_MCP ← Resource result: {uri} ({_elapsed_ms(start):.1f}ms)")
        if self.log_response_data:
            logger.info(f"CLIENT_MCP   Resource '{uri}' result: {self._truncate_data(result)}")
        return result

    async def on_get_prompt(self, context: MiddlewareContext, call_next):
        name = getattr(context.message, "name", "unknown")
        logger.info(f"CLIENT_MCP → Prompt request: {name}")
        arguments = getattr(context.message, "arguments", None)
        if self.log_request_params and arguments:
            logger.info(f"CLIENT_MCP   Prompt arguments: {self._truncate_data(arguments)}")

        try:
            result = await call_next(context)
        except Exception as e:
            logger.error(f"CLIENT_MCP ✗ Prompt error: {name}")
            logger.error(f"CLIENT_MCP   {e.__class__.__name__}: {e}")
            raise

        logger.info(f"CLIENT_MCP ← Prompt result: {name}")
        return result
