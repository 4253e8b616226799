"""
xmcp Adapter HTTP Server

JSON-over-HTTP transport for the tool dispatcher:
- GET  <endpoint>                               -> tool list
- POST <endpoint> {"method": "tools/list"}      -> tool list
- POST <endpoint> {"method": "tools/call", ...} -> tool result or error

Author: xmcp adapter maintainers
"""

import logging
import os
from typing import Optional

import uvicorn
from dotenv import find_dotenv, load_dotenv
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .dispatcher import ErrorKind, Response, ToolDispatcher
from .server import get_log_level
from .tools import Registry, default_registry

logger = logging.getLogger("xmcp-adapter")

DEFAULT_ENDPOINT = "/mcp"

# Every verb reaches the dispatcher so unsupported ones get the error envelope
ENDPOINT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_endpoint() -> str:
    """Endpoint path from XMCP_ENDPOINT, always with a leading slash."""
    endpoint = os.environ.get("XMCP_ENDPOINT", DEFAULT_ENDPOINT).strip() or DEFAULT_ENDPOINT
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    return endpoint


def _render(response: Response) -> JSONResponse:
    try:
        return JSONResponse(response.payload, status_code=response.status_code)
    except (TypeError, ValueError) as e:
        logger.error(f"Tool result is not JSON serializable: {e}")
        fallback = Response.error(ErrorKind.TOOL_EXECUTION_ERROR)
        return JSONResponse(fallback.payload, status_code=fallback.status_code)


def create_app(registry: Optional[Registry] = None, endpoint: Optional[str] = None) -> Starlette:
    """Create the Starlette ASGI application."""
    if registry is None:
        registry = default_registry()
    if endpoint is None:
        endpoint = get_endpoint()
    dispatcher = ToolDispatcher(registry)

    async def handle(request: Request) -> JSONResponse:
        body = await request.body() if request.method == "POST" else None
        response = await dispatcher.route(request.method, body)
        return _render(response)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "healthy",
            "server": "xmcp-adapter",
            "tools": len(registry),
        })

    routes = [
        Route("/health", health, methods=["GET"]),
        Route(endpoint, handle, methods=ENDPOINT_METHODS),
    ]

    logger.info(f"Serving {len(registry)} tool(s) at {endpoint}")
    return Starlette(routes=routes)


def main():
    """Main entry point for HTTP server."""
    load_dotenv(find_dotenv(usecwd=True))
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    # Logging was configured at import, before .env was read
    log_level = get_log_level()
    logger.setLevel(log_level)

    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
