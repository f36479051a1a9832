from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .config import Settings, configure_logging, get_settings
from .github_client import GitHubClient
from .tools import ToolRegistry
from .tools import address_tools, arithmetic_tools, github_tools
from .zipcloud_client import ZipCloudClient

logger = logging.getLogger(__name__)

SERVER_NAME = "study-server"


def build_registry(
    settings: Settings,
    github_client: Optional[GitHubClient] = None,
    zipcloud_client: Optional[ZipCloudClient] = None,
) -> ToolRegistry:
    """Create the tool registry with every tool group registered."""
    github_client = github_client or GitHubClient(settings)
    zipcloud_client = zipcloud_client or ZipCloudClient(settings)

    registry = ToolRegistry()

    # Register tool groups
    arithmetic_tools.register_tools(registry)
    address_tools.register_tools(registry, zipcloud_client=zipcloud_client)
    github_tools.register_tools(registry, github_client=github_client)

    return registry


def create_server_with_registry(
    settings: Optional[Settings] = None,
    registry: Optional[ToolRegistry] = None,
) -> Tuple[Server, ToolRegistry]:
    """
    Create the MCP server together with the registry backing it.

    The HTTP transport needs direct access to the registry, the stdio
    transport only to the server.
    """
    settings = settings or get_settings()
    registry = registry or build_registry(settings)

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return registry.list_tools()

    # Arguments are validated by the registry, which reports the offending field.
    @server.call_tool(validate_input=False)
    async def call_tool(
        name: str,
        arguments: Dict[str, Any],
    ) -> List[types.TextContent]:
        result = await registry.invoke(name, arguments)
        return [types.TextContent(type="text", text=result)]

    return server, registry


def create_server(settings: Optional[Settings] = None) -> Server:
    """
    Create and configure the MCP server with all registered tools.
    """
    server, _ = create_server_with_registry(settings)
    return server


async def run_stdio_server(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    """
    Entrypoint for running the MCP server.

    Supports two transport modes:
    - stdio: For direct process-to-process communication (default)
    - http: For HTTP/SSE transport behind reverse proxy
    """
    settings = get_settings()
    configure_logging(settings)

    if settings.transport == "http":
        # Run HTTP server
        from .http_server import run_http_server
        anyio.run(run_http_server, settings.server_host, settings.server_port)
    else:
        # Run stdio server (default)
        server = create_server(settings)
        logger.info("Starting %s on stdio", SERVER_NAME)
        anyio.run(run_stdio_server, server)


if __name__ == "__main__":
    main()
