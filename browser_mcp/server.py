"""
MCP server for browser sessions, served over SSE (Starlette + uvicorn) or stdio.
"""
import argparse
import contextlib
import json
import logging
import sys
from typing import List, Optional

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from .browser_manager import PlaywrightBrowserManager
from .config import DEFAULT_HOST, DEFAULT_PORT, SERVER_NAME, SERVER_VERSION
from .tools import create_tools, handle_tool_call

logger = logging.getLogger(__name__)


def create_server(browser_manager: PlaywrightBrowserManager) -> Server:
    """Create the MCP server and register its tools"""
    app = Server(SERVER_NAME, version=SERVER_VERSION)

    @app.list_tools()
    async def list_tools() -> List[types.Tool]:
        return create_tools()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict) -> List[types.TextContent]:
        try:
            return await handle_tool_call(browser_manager, name, arguments)
        except Exception as e:
            logger.error(f"Tool call {name} failed: {e}", exc_info=True)
            return [types.TextContent(
                type="text",
                text=json.dumps({"error": f"Tool call failed: {e}"}, ensure_ascii=False),
            )]

    return app


def create_starlette_app(browser_manager: PlaywrightBrowserManager, debug: bool = False) -> Starlette:
    """Create the SSE web application"""
    app = create_server(browser_manager)
    sse_transport = SseServerTransport("/messages/")

    async def handle_sse(request: Request):
        logger.info(f"SSE connection: {request.method} {request.url}")
        async with sse_transport.connect_sse(
            request.scope, request.receive, request._send
        ) as streams:
            await app.run(streams[0], streams[1], app.create_initialization_options())
        logger.info("SSE session ended")
        return Response()

    async def health(request: Request):
        return JSONResponse({
            "status": "ok",
            "service": SERVER_NAME,
            "version": SERVER_VERSION,
            "sessions": browser_manager.registry.list(),
        })

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette):
        yield
        logger.info("Shutting down browser sessions")
        await browser_manager.stop()

    return Starlette(
        debug=debug,
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Route("/mcp", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse_transport.handle_post_message),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


async def run_stdio(browser_manager: PlaywrightBrowserManager):
    app = create_server(browser_manager)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    finally:
        await browser_manager.stop()


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browser session MCP server (Playwright).")
    parser.add_argument(
        "--transport",
        choices=["sse", "stdio"],
        default="sse",
        help="MCP transport (default: sse).",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"SSE bind address (default: {DEFAULT_HOST}).")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"SSE port (default: {DEFAULT_PORT}).")
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window (default: headless).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Start the server"""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    # stdout carries the protocol in stdio mode
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    browser_manager = PlaywrightBrowserManager(headless=not args.headed)

    if args.transport == "stdio":
        logger.info("Starting browser session MCP server on stdio")
        anyio.run(run_stdio, browser_manager)
        return

    import uvicorn

    display_host = args.host if args.host != "0.0.0.0" else "localhost"
    logger.info(f"Starting browser session MCP server at http://{display_host}:{args.port}")
    logger.info(f"SSE endpoint: http://{display_host}:{args.port}/sse")
    uvicorn.run(create_starlette_app(browser_manager), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
