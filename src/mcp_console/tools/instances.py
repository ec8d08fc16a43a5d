"""Tools for listing configured console backends."""

from typing import Any

from mcp_console.formatters import fmt
from mcp_console.models import ReadParams
from mcp_console.registry import get_all_instances, get_session
from mcp_console.server import mcp


@mcp.tool(
    name="console_list_instances",
    annotations={
        "title": "List Configured Console Backends",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_list_instances(params: ReadParams) -> str:
    """List all configured console backends and probe their availability."""
    results = []
    for name, client in get_all_instances().items():
        entry: dict[str, Any] = {"name": name, "url": client.url}
        try:
            await client.health()
            entry["available"] = True
            if not params.concise:
                session = get_session(name)
                entry["serverQuery"] = session.servers.query.to_params()
                entry["toolsLoaded"] = len(session.tools)
        except Exception as exc:
            entry.update({"available": False, "error": str(exc)})
        results.append(entry)
    return fmt(results, concise=params.concise)
