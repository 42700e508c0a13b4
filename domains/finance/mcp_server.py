"""
Finance Engine MCP Server — MCP adapter over the dispatch router.

Transports:
- stdio
- SSE (GET /sse, POST /messages/)
- streamable HTTP (/mcp)

The HTTP transports also serve GET /health. Each tool call returns the
ToolResponse envelope as JSON text; failure envelopes are flagged isError.
"""

import contextlib
import json
import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from domains.finance.config import ENGINE_INSTRUCTIONS, ENGINE_NAME, ENGINE_VERSION
from domains.finance.router import ToolRouter

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries a failure envelope out of call_tool so the SDK flags it isError."""


def tool_list(router: ToolRouter) -> list[types.Tool]:
    return [
        types.Tool(name=descriptor.name, description=descriptor.description, inputSchema=descriptor.input_schema)
        for descriptor in router.list_tools()
    ]


async def call_tool_content(router: ToolRouter, name: str, arguments: Any) -> tuple[list[types.TextContent], bool]:
    """Dispatch and render the envelope; returns (content, is_error)."""
    response = await router.dispatch(name, arguments if arguments is not None else {})
    text = json.dumps(response.model_dump(mode="json"), indent=2)
    return [types.TextContent(type="text", text=text)], not response.ok


def create_mcp_server(router: ToolRouter) -> Server:
    server = Server(ENGINE_NAME, version=ENGINE_VERSION, instructions=ENGINE_INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_list(router)

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        content, is_error = await call_tool_content(router, name, arguments)
        if is_error:
            raise ToolCallFailed(content[0].text)
        return content

    return server


async def _health(request: Request) -> JSONResponse:
    router: ToolRouter = request.app.state.router
    return JSONResponse({"status": "ok", "service": ENGINE_NAME, "version": ENGINE_VERSION, "tools": len(router.catalog)})


# ─── Transports ─────────────────────────────────────────────────────────────


async def run_stdio(router: ToolRouter) -> None:
    from mcp.server.stdio import stdio_server

    server = create_mcp_server(router)
    logger.info("Serving %d tools over stdio", len(router.catalog))
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_sse_app(router: ToolRouter) -> Starlette:
    from mcp.server.sse import SseServerTransport

    server = create_mcp_server(router)
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(request.scope, request.receive, request._send) as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
        return Response()

    app = Starlette(
        routes=[
            Route("/health", endpoint=_health, methods=["GET"]),
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
        ],
    )
    app.state.router = router
    return app


def create_streamable_http_app(router: ToolRouter, json_response: bool = False) -> Starlette:
    from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

    server = create_mcp_server(router)
    session_manager = StreamableHTTPSessionManager(app=server, json_response=json_response)

    async def handle_streamable_http(scope, receive, send) -> None:
        await session_manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        async with session_manager.run():
            logger.info("Streamable HTTP session manager started")
            yield
        logger.info("Streamable HTTP session manager stopped")

    app = Starlette(
        routes=[
            Route("/health", endpoint=_health, methods=["GET"]),
            Mount("/mcp", app=handle_streamable_http),
        ],
        lifespan=lifespan,
    )
    app.state.router = router
    return app
