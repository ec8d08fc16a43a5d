"""Import all tool sub-modules so their @mcp.tool decorators run at import time."""

from mcp_console.tools import catalog  # noqa: F401
from mcp_console.tools import instances  # noqa: F401
from mcp_console.tools import servers  # noqa: F401
