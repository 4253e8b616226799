"""
Tool Dispatcher

Translates one incoming request (HTTP method + raw body) into one outgoing
response (status code + JSON payload) for the tools/list and tools/call
protocol methods.

Author: xmcp adapter maintainers

Error Handling Strategy:
- Every failure maps to exactly one ErrorKind and a fixed JSON-RPC code
- Tool handler exceptions are caught here, logged, and returned as errors
- Nothing raised by a handler propagates to the host transport
"""

import enum
import json
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Optional, Union

import mcp.types as mcp_types

from .tools import Registry

logger = logging.getLogger("xmcp-adapter")


class ErrorKind(enum.Enum):
    """Protocol failures: (JSON-RPC code, HTTP status, default message)."""
    PARSE_ERROR = (mcp_types.PARSE_ERROR, 400, "Parse error")
    METHOD_NOT_FOUND = (mcp_types.METHOD_NOT_FOUND, 404, "Method not found")
    TOOL_NOT_FOUND = (mcp_types.METHOD_NOT_FOUND, 404, "Tool not found")
    TOOL_EXECUTION_ERROR = (mcp_types.INTERNAL_ERROR, 500, "Internal error")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def status_code(self) -> int:
        return self.value[1]

    @property
    def message(self) -> str:
        return self.value[2]


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str


CallResult = Union[Ok, Err]


def _error_message(exc: Exception) -> str:
    """The handler's own message, or Internal error when it has none."""
    if len(exc.args) == 1 and isinstance(exc.args[0], str):
        message = exc.args[0]
    else:
        message = str(exc)
    return message or ErrorKind.TOOL_EXECUTION_ERROR.message


@dataclass(frozen=True)
class Response:
    """Outgoing response. The payload holds exactly one of tools, result, error."""
    status_code: int
    payload: dict

    @classmethod
    def error(cls, kind: ErrorKind, message: Optional[str] = None) -> "Response":
        error = mcp_types.ErrorData(code=kind.code, message=message or kind.message)
        return cls(kind.status_code, {"error": error.model_dump(exclude_none=True)})


class ToolDispatcher:
    """Routes protocol requests against a read-only tool registry."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def list_tools(self) -> list[dict]:
        """Return every registered tool in registration order."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema(),
            }
            for tool in self.registry.values()
        ]

    async def call_tool(self, name: Optional[str], arguments: Any = None) -> CallResult:
        """Invoke a registered tool once.

        Args:
            name: Tool name. Anything not in the registry is ToolNotFound.
            arguments: Passed to the handler as given, possibly None.

        Returns:
            Ok(value) with the handler's value, or Err(kind, message).
        """
        tool = self.registry.get(name) if isinstance(name, str) else None
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return Err(ErrorKind.TOOL_NOT_FOUND, ErrorKind.TOOL_NOT_FOUND.message)

        logger.info(f"Tool call: {name}")
        try:
            value = await tool.handler(arguments)
        except Exception as e:
            logger.error(f"Tool '{name}' failed with error: {e}")
            logger.error(f"Arguments: {arguments}")
            logger.error(f"Traceback:\n{traceback.format_exc()}")
            return Err(ErrorKind.TOOL_EXECUTION_ERROR, _error_message(e))

        logger.info(f"Tool {name} completed successfully")
        return Ok(value)

    async def route(self, method: str, body: Union[str, bytes, None] = None) -> Response:
        """Top-level entry: map (HTTP method, raw body) to one response."""
        method = (method or "").upper()
        if method == "GET":
            return self._tools_response()
        if method != "POST":
            logger.warning(f"Unsupported HTTP method: {method}")
            return Response.error(ErrorKind.METHOD_NOT_FOUND)

        try:
            request = json.loads(body)
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not parse request body: {e}")
            return Response.error(ErrorKind.PARSE_ERROR)

        rpc_method = request.get("method") if isinstance(request, dict) else None
        if rpc_method == "tools/list":
            return self._tools_response()
        if rpc_method == "tools/call":
            params = request.get("params")
            if not isinstance(params, dict):
                params = {}
            result = await self.call_tool(params.get("name"), params.get("arguments"))
            if isinstance(result, Ok):
                return Response(200, {"result": result.value})
            return Response.error(result.kind, result.message)

        logger.warning(f"Unknown protocol method: {rpc_method}")
        return Response.error(ErrorKind.METHOD_NOT_FOUND)

    def _tools_response(self) -> Response:
        tools = self.list_tools()
        logger.debug(f"tools/list returning {len(tools)} tools")
        return Response(200, {"tools": tools})
