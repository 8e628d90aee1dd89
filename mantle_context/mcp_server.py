"""
MCP server exposing the on-chain context tools over stdio.

Usage:
    mantle-context-mcp            (or: python -m mantle_context.mcp_server)

Then connect an MCP-compatible client via stdio using this command.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Dict, List, Mapping

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from mantle_context.config import get_settings
from mantle_context.http import HttpClient
from mantle_context.services.aggregator import Aggregator
from mantle_context.tools import ToolSpec, build_registry, invoke_tool
from mantle_context.utils.logging import setup_logging

logger = logging.getLogger(__name__)

SERVER_NAME = "mantle-onchain-context"


def tool_definitions(registry: Mapping[str, ToolSpec]) -> List[types.Tool]:
    return [
        types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema())
        for t in registry.values()
    ]


async def call(
    name: str,
    arguments: Dict[str, Any] | None,
    aggregator: Aggregator,
    registry: Mapping[str, ToolSpec],
) -> List[types.TextContent]:
    text = await invoke_tool(name, arguments, aggregator, registry)
    return [types.TextContent(type="text", text=text)]


def create_server(aggregator: Aggregator, registry: Mapping[str, ToolSpec]) -> Server:
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def _list_tools() -> List[types.Tool]:
        return tool_definitions(registry)

    # Exceptions raised here reach the caller as a tool error result
    @server.call_tool()
    async def _call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        return await call(name, arguments, aggregator, registry)

    return server


async def serve() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, stream=sys.stderr)
    http = HttpClient()
    registry = build_registry(settings)
    server = create_server(Aggregator(http), registry)
    logger.info(f"{SERVER_NAME} running on stdio with {len(registry)} tools")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await http.aclose()


def main() -> None:
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
