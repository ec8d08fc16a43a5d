"""FastMCP server creation and lifespan."""

import logging
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from mcp_console.registry import get_all_instances

_LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app):
    instances = get_all_instances()
    urls = {name: client.url for name, client in instances.items()}
    _LOGGER.info(f"MCP Console: {len(instances)} backend instance(s) configured: {urls}")
    yield {}


mcp = FastMCP("mcp_console", lifespan=app_lifespan)

# Import all tool modules so they register with `mcp` via decorators.
import mcp_console.tools  # noqa: E402, F401
