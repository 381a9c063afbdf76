"""MCP server for Jira Cloud tools.

This server exposes Jira issues, worklogs, agile boards, filters and
dashboards via the Model Context Protocol (MCP). Credentials come from
the auth tools, the ``JIRA_*`` environment variables or the OS keyring.
"""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .. import __version__
from ..config import get_settings
from ..utils.logger import setup_logging
from .handlers import create_session, dispatch_tool, set_session
from .tools import get_tools

logger = logging.getLogger(__name__)

# Create the MCP server
server = Server("jira-mcp", version=__version__)


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools.

    Returns:
        List of MCP Tool objects.
    """
    tools = get_tools()
    return [
        Tool(
            name=tool["name"],
            description=tool["description"],
            inputSchema=tool["inputSchema"],
        )
        for tool in tools
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle a tool call.

    Args:
        name: Tool name.
        arguments: Tool arguments.

    Returns:
        List containing a single TextContent with the JSON result.
    """
    try:
        result = await dispatch_tool(name, arguments)
    except ValueError as e:
        logger.warning(str(e))
        result = {"error": "unknown_tool", "message": str(e), "tool": name}
    return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]


async def run_server() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Jira MCP server {__version__}...")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    """Main entry point for jira-mcp command."""
    settings = get_settings()
    setup_logging(settings.log_level)
    set_session(create_session(settings))

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
