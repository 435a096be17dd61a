"""MCP server adapter.

Registers tool and resource handlers on the MCP SDK's low-level
``Server`` and runs it over stdio. All real work is delegated to
ToolDispatcher; this module only translates between MCP types and
plain strings.

Tool failures are raised from the handler so the SDK returns them as
``isError`` results whose text is the failure message unchanged.
"""

import logging
from collections.abc import Iterable
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from .dispatcher import ToolDispatcher, ToolError
from .tools import RESOURCE_DEFINITIONS, RESOURCE_TEMPLATE_DEFINITIONS, TOOL_DEFINITIONS

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "erpnext-server-extended"


def build_server(dispatcher: ToolDispatcher, name: str = DEFAULT_SERVER_NAME) -> Server:
    """Create an MCP server whose handlers delegate to ``dispatcher``.

    Args:
        dispatcher: Tool dispatcher bound to an ERPNextPort.
        name: Server name reported during initialization.

    Returns:
        A configured (not yet running) low-level MCP server.
    """
    server: Server = Server(name)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [types.Tool(**definition) for definition in TOOL_DEFINITIONS]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        logger.info(f"Tool call: {name}")
        text = await dispatcher.call_tool(name, arguments)
        return [types.TextContent(type="text", text=text)]

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [types.Resource(**definition) for definition in RESOURCE_DEFINITIONS]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(**definition) for definition in RESOURCE_TEMPLATE_DEFINITIONS
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        try:
            text = await dispatcher.read_resource(str(uri))
        except ToolError as e:
            raise McpError(types.ErrorData(code=types.INVALID_REQUEST, message=str(e))) from e
        return [ReadResourceContents(content=text, mime_type="application/json")]

    return server


async def serve_stdio(server: Server) -> None:
    """Run ``server`` over stdin/stdout until the client disconnects.

    stdout carries the protocol stream; logging must go to stderr.
    """
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
