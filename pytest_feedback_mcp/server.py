"""
Stdio MCP server exposing the feedback-driven test generator.

Tool definitions and handlers live in `handlers.core`; this module only
publishes them and dispatches calls by tool name.
"""

from __future__ import annotations

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent

from .handlers.core import HANDLERS as CORE_HANDLERS
from .handlers.core import TOOLS as CORE_TOOLS

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

server = Server("pytest-feedback")

ALL_TOOLS = [*CORE_TOOLS]
ALL_HANDLERS = {**CORE_HANDLERS}


@server.list_tools()
async def list_tools():
    """Advertise the generation tools to the client."""
    return ALL_TOOLS


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Dispatch a tool call; unknown names get a plain text reply."""
    logger.info(f"Tool requested: {name}")

    handler = ALL_HANDLERS.get(name)
    if handler is None:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    return await handler(arguments)


async def run_server():
    """Serve MCP requests over stdin/stdout until the client disconnects."""
    logger.info(f"pytest-feedback MCP server ready with tools: {[t.name for t in ALL_TOOLS]}")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


def main():
    """Console script `pytest-feedback-mcp`."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
