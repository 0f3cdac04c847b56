"""MCP stream adapter over the shared dispatch bridge."""

from __future__ import annotations

import logging
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from sonarqube_mcp import SERVER_NAME, __version__
from sonarqube_mcp.serving.mcp import errors
from sonarqube_mcp.serving.mcp.dispatch import DispatchBridge

LOG = logging.getLogger("sonarqube_mcp.serving.mcp.server")


def to_mcp_error(exc: errors.DispatchError) -> McpError:
    """
    Translate a dispatch error into the protocol error envelope.

    Returns
    -------
    McpError
        Error carrying ``{code, message}`` for the MCP runtime.
    """
    return McpError(types.ErrorData(code=exc.code, message=exc.message, data=exc.detail.data))


def create_mcp_server(bridge: DispatchBridge) -> Server:
    """
    Create a low-level MCP server whose handlers delegate to the bridge.

    Parameters
    ----------
    bridge:
        Dispatch bridge shared with the HTTP surface.

    Returns
    -------
    Server
        Server with tools and resources handlers registered.
    """
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=op.name, description=op.description, inputSchema=op.input_schema)
            for op in bridge.list_operations()
        ]

    # Raw handler: McpError must reach the client as a JSON-RPC error,
    # not as an ``isError`` result.
    async def _call_tool(request: types.CallToolRequest) -> types.ServerResult:
        arguments: dict[str, Any] | None = request.params.arguments
        try:
            result = await bridge.invoke(request.params.name, arguments, transport="mcp")
        except errors.DispatchError as exc:
            raise to_mcp_error(exc) from exc
        content = [types.TextContent(type="text", text=item.text) for item in result.content]
        return types.ServerResult(types.CallToolResult(content=content))

    server.request_handlers[types.CallToolRequest] = _call_tool

    @server.list_resources()
    async def _list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=AnyUrl(res.uri),
                name=res.name,
                description=res.description,
                mimeType=res.mime_type,
            )
            for res in bridge.list_resources()
        ]

    @server.read_resource()
    async def _read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            result = await bridge.read(str(uri), transport="mcp")
        except errors.DispatchError as exc:
            raise to_mcp_error(exc) from exc
        return [
            ReadResourceContents(content=item.text, mime_type=item.mime_type)
            for item in result.contents
        ]

    return server


async def run_stdio(server: Server) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    LOG.info("SonarQube MCP server running on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


__all__ = ["create_mcp_server", "run_stdio", "to_mcp_error"]
