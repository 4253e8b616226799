"""
xmcp Adapter MCP Server

Exposes the tool registry to MCP clients over the stdio transport. Tool
listing and invocation both go through the ToolDispatcher, so stdio and
HTTP clients see the same tools and the same error taxonomy.

Author: xmcp adapter maintainers
Started: October 19, 2026

Error Handling Strategy:
- Startup failures are logged to stderr and exit with status 1
- An unknown XMCP_LOG_LEVEL falls back to INFO instead of failing the import
- Failed tool calls are raised as ToolCallError; the MCP server turns them
  into error results instead of crashing
"""

import json
import logging
import os
import sys
import traceback
from typing import Any, Optional


def get_log_level(default: int = logging.INFO) -> int:
    """Log level named by XMCP_LOG_LEVEL, or default for a missing/unknown name."""
    level = getattr(logging, os.environ.get("XMCP_LOG_LEVEL", "").strip().upper(), None)
    return level if isinstance(level, int) else default


# Configure logging FIRST, before any other imports that might log
logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("xmcp-adapter")

try:
    from mcp.server import Server
    from mcp.server.stdio import stdio_server
    from mcp.types import Tool, TextContent
except ImportError as e:
    logger.critical(f"Failed to import MCP library: {e}")
    logger.critical("Make sure 'mcp' is installed: pip install mcp")
    sys.exit(1)

from .dispatcher import ErrorKind, Ok, ToolDispatcher
from .tools import Registry, default_registry


class ToolCallError(Exception):
    """A tools/call that ended in a protocol error."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.code = kind.code


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def create_server(registry: Optional[Registry] = None) -> Server:
    """Create the MCP server for the given registry.

    Args:
        registry: Tools to expose. Defaults to the built-in tools.

    Returns:
        Configured MCP Server instance.
    """
    logger.info("Creating MCP server...")
    if registry is None:
        registry = default_registry()
    dispatcher = ToolDispatcher(registry)
    server = Server("xmcp-adapter")
    logger.info(f"Registry loaded ({len(registry)} tools)")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [
            Tool(**entry, annotations=registry[entry["name"]].annotations)
            for entry in dispatcher.list_tools()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Dispatch a tool call, raising ToolCallError on failure."""
        result = await dispatcher.call_tool(name, arguments)
        if isinstance(result, Ok):
            return [TextContent(type="text", text=_to_text(result.value))]
        raise ToolCallError(result.kind, result.message)

    logger.info("Server handlers registered")
    return server


# =============================================================================
# Main Entry Point (stdio transport)
# =============================================================================

async def run():
    """Run the MCP server via stdio transport."""
    logger.info("Starting xmcp adapter (stdio)...")
    server = create_server()

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Transport ready, starting server loop...")
            init_options = server.create_initialization_options()
            await server.run(read_stream, write_stream, init_options)
    finally:
        logger.info("Server shutdown complete")


def main():
    """Main entry point. Logs any fatal error to stderr and exits non-zero."""
    import asyncio

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.critical(f"FATAL ERROR: {type(e).__name__}: {e}")
        logger.critical(f"Full traceback:\n{traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    main()
