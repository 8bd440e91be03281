"""Linear MCP Server - Expose Linear project tracking to AI assistants."""
import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import EmbeddedResource, ImageContent, TextContent, Tool

from . import tools
from .auth import LinearAuth
from .config import get_settings
from .dispatcher import ToolDispatcher
from .errors import ToolError

settings = get_settings()

# Configure logging to stderr (stdout carries the MCP protocol)
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("linear-mcp")

logger.info(f"MCP Server starting with LINEAR_API_URL: {settings.linear_api_url}")
if settings.linear_access_token:
    logger.info("MCP Server configured with a static Linear access token")
else:
    logger.info("MCP Server running without a token; use linear_auth to start the OAuth flow")


# MCP Server instance
app = Server("linear-mcp")

# Session state is process-wide: each stdio connection runs in its own process
auth = LinearAuth(settings)
dispatcher = ToolDispatcher(auth)


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools for Linear."""
    return tools.get_tools()


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent | ImageContent | EmbeddedResource]:
    """Handle MCP tool calls by delegating to the dispatcher.

    Classified failures are logged and re-raised so the SDK marks the
    result with isError and the classified message.
    """
    try:
        envelope = await dispatcher.dispatch(name, arguments)
    except ToolError as e:
        logger.error(f"{e.kind.value} during {name} call: {e.message}")
        if e.cause is not None:
            logger.error(f"  Caused by {type(e.cause).__name__}: {e.cause}")
        raise

    return envelope.to_content()


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
