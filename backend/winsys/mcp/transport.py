"""Binds the dispatcher to the MCP SDK's low-level server over stdio."""

from __future__ import annotations

import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .dispatcher import ToolDispatcher
from .registry import ToolRegistry
from .schema import ToolCallRequest, ToolDescriptor

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries a failure result's text to the SDK, which flags it with isError."""


def to_mcp_tool(descriptor: ToolDescriptor) -> types.Tool:
    return types.Tool(
        name=descriptor.name,
        description=descriptor.description,
        inputSchema=descriptor.input_schema,
    )


def create_mcp_server(
    registry: ToolRegistry,
    dispatcher: ToolDispatcher,
    *,
    name: str,
    version: str,
) -> Server:
    """Build an SDK server whose handlers delegate to the registry and dispatcher."""
    server: Server = Server(name, version=version)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [to_mcp_tool(descriptor) for descriptor in registry.list_tools()]

    # Arguments are validated by the dispatcher, not the SDK.
    @server.call_tool(validate_input=False)
    async def _call_tool(
        tool_name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        result = await dispatcher.execute(
            ToolCallRequest(tool_name=tool_name, arguments=arguments or {})
        )
        if result.is_error:
            raise ToolCallFailed(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server


async def serve_stdio(server: Server) -> None:
    logger.info("mcp server listening on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
