"""
Finance Engine — Main CLI Entrypoint.

Commands:
- serve  run a transport (stdio, sse, streamable-http, http)
- tools  list the tool catalogue
- call   invoke one tool with a JSON argument object
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from domains.finance.config import (
    ENGINE_NAME,
    ENGINE_VERSION,
    load_enabled_tools,
    load_retriever_settings,
    load_server_settings,
)
from domains.finance.router import ToolRouter, build_router

# ─── Configuration ──────────────────────────────────────────────

logger = logging.getLogger(__name__)

# Ensure local .env is loaded before reading runtime configuration.
load_dotenv(override=False)

TRANSPORTS = ("stdio", "sse", "streamable-http", "http")

# ─── Rich Console ───────────────────────────────────────────────

# stdout belongs to the MCP stdio transport; human output goes to stderr there
console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str | None = None) -> None:
    """Configure logging (stderr)."""
    logging.basicConfig(
        level=getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def make_router() -> ToolRouter:
    return build_router(
        retriever_settings=load_retriever_settings(),
        enabled_tools=load_enabled_tools(),
    )


# ─── Commands ───────────────────────────────────────────────────

def serve(transport: str, host: str | None, port: int | None, json_response: bool = False) -> None:
    settings = load_server_settings()
    host = host or settings.host
    port = port or settings.port
    router = make_router()

    if transport == "stdio":
        from domains.finance.mcp_server import run_stdio

        asyncio.run(run_stdio(router))
        return

    import uvicorn

    if transport == "sse":
        from domains.finance.mcp_server import create_sse_app

        app = create_sse_app(router)
    elif transport == "streamable-http":
        from domains.finance.mcp_server import create_streamable_http_app

        app = create_streamable_http_app(router, json_response=json_response)
    else:
        from domains.finance.server import create_app

        app = create_app(router)

    err_console.print(Panel(
        f"[bold]{ENGINE_NAME}[/] v{ENGINE_VERSION}\n"
        f"Transport: [cyan]{transport}[/]  •  http://{host}:{port}  •  {len(router.catalog)} tools",
        title="💹 Finance Engine",
        border_style="green",
        box=box.ROUNDED,
    ))
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def list_tools() -> None:
    router = make_router()
    table = Table(title=f"{ENGINE_NAME} tools", box=box.SIMPLE_HEAVY)
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Required", style="magenta")
    table.add_column("Description", style="dim")
    for descriptor in router.list_tools():
        table.add_row(descriptor.name, ", ".join(descriptor.required), descriptor.description)
    console.print(table)


def call_tool(tool: str, raw_arguments: str) -> int:
    try:
        arguments = json.loads(raw_arguments)
    except json.JSONDecodeError:
        console.print("[bold red]Error:[/] Arguments must be valid JSON.")
        return 2

    router = make_router()
    response = asyncio.run(router.dispatch(tool, arguments))
    payload = json.dumps(response.model_dump(mode="json"), indent=2, ensure_ascii=False)
    console.print(Panel(
        Syntax(payload, "json", word_wrap=True),
        title=f"{'✅' if response.ok else '❌'} {response.tool}",
        border_style="green" if response.ok else "red",
        box=box.ROUNDED,
    ))
    return 0 if response.ok else 1


def main() -> None:
    """Entrypoint with CLI args."""
    parser = argparse.ArgumentParser(description="Finance Engine")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    serve_parser = subparsers.add_parser("serve", help="Run a server transport")
    serve_parser.add_argument("--transport", choices=TRANSPORTS, default="stdio", help="Transport (default: stdio)")
    serve_parser.add_argument("--host", default=None, help="Bind host (default: BIND_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default: BIND_PORT)")
    serve_parser.add_argument(
        "--json-response", action="store_true", help="Streamable HTTP: reply with JSON instead of SSE streams"
    )

    subparsers.add_parser("tools", help="List available tools")

    call_parser = subparsers.add_parser("call", help="Invoke a tool once")
    call_parser.add_argument("tool", help="Tool name, e.g. gini_coefficient")
    call_parser.add_argument("arguments", nargs="?", default="{}", help="JSON object of arguments")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.command == "serve":
        try:
            serve(args.transport, args.host, args.port, json_response=args.json_response)
        except KeyboardInterrupt:
            pass
    elif args.command == "tools":
        list_tools()
    elif args.command == "call":
        sys.exit(call_tool(args.tool, args.arguments))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
