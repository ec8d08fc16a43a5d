"""Token-efficient formatters for console records, pages and the tool tree.

Default output is compact JSON. Concise mode keeps only the fields needed to
pick the next action (ids, names, flags, counts); full mode adds descriptions,
timestamps and parameter schemas.
"""

import json
from collections.abc import Iterable
from typing import Any

from mcp_console.hierarchy import CategoryNode, ServerNode, ToolNode
from mcp_console.models import Server, Tool
from mcp_console.optimistic import Outcome
from mcp_console.query import QueryState
from mcp_console.sync import CollectionSynchronizer

# ---------------------------------------------------------------------------
#  Constants
# ---------------------------------------------------------------------------

CHARACTER_LIMIT = 25_000


# ---------------------------------------------------------------------------
#  Core helpers
# ---------------------------------------------------------------------------


def fmt(data: Any, *, concise: bool = True) -> str:
    """Serialize to JSON.  Compact by default for token efficiency."""
    if concise:
        return json.dumps(data, separators=(",", ":"), default=str)
    return json.dumps(data, indent=2, default=str)


def truncate(text: str, limit: int = CHARACTER_LIMIT) -> str:
    """Truncate text that exceeds the character limit, with guidance."""
    if len(text) <= limit:
        return text
    cut = text[:limit]
    last_nl = cut.rfind("\n")
    if last_nl > limit * 0.8:
        cut = cut[:last_nl]
    return (
        cut
        + f"\n... truncated ({len(text):,} chars, limit {limit:,})."
        " Use pagination or filters to narrow results."
    )


def _ts(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
#  Entity formatters
# ---------------------------------------------------------------------------


def format_server(server: Server, *, concise: bool = True) -> dict:
    if concise:
        return {
            "id": server.id,
            "name": server.name,
            "status": server.status,
            "enabled": server.is_enabled,
            "tags": server.tag_list,
        }
    return {
        "id": server.id,
        "name": server.name,
        "description": server.description,
        "url": server.url,
        "authType": server.auth_type,
        "status": server.status,
        "enabled": server.is_enabled,
        "tags": server.tag_list,
        "createdAt": _ts(server.created_at),
        "updatedAt": _ts(server.updated_at),
    }


def format_tool(tool: Tool, *, concise: bool = True) -> dict:
    if concise:
        return {
            "id": tool.id,
            "name": tool.name,
            "category": tool.category,
            "enabled": tool.is_enabled,
        }
    return {
        "id": tool.id,
        "serverId": tool.server_id,
        "name": tool.name,
        "description": tool.description,
        "category": tool.category,
        "enabled": tool.is_enabled,
        "parameters": tool.parameters,
        "createdAt": _ts(tool.created_at),
        "updatedAt": _ts(tool.updated_at),
    }


def format_query(query: QueryState) -> dict:
    data: dict[str, Any] = {
        "page": query.page,
        "size": query.size,
        "sort": f"{query.order_by} {query.order_dir}",
    }
    if query.search:
        data["search"] = query.search
    if query.status:
        data["status"] = query.status
    if query.enabled is not None:
        data["enabled"] = query.enabled
    return data


def format_server_page(sync: CollectionSynchronizer, *, concise: bool = True) -> dict:
    """Current page, its query and paging totals, read from one snapshot."""
    items, total = sync.snapshot
    query = sync.query
    pages = (total + query.size - 1) // query.size if total else 0
    data: dict[str, Any] = {
        "query": format_query(query),
        "total": total,
        "pages": pages,
        "servers": [format_server(s, concise=concise) for s in items],
    }
    if sync.error:
        data["error"] = sync.error
    return data


# ---------------------------------------------------------------------------
#  Tree
# ---------------------------------------------------------------------------


def _format_tool_node(node: ToolNode, *, concise: bool) -> dict:
    data = format_tool(node.tool, concise=concise)
    data.pop("category", None)
    if not concise:
        data["key"] = node.key
    return data


def _format_category_node(node: CategoryNode, *, concise: bool) -> dict:
    data: dict[str, Any] = {
        "category": node.category,
        "tools": node.count,
        "enabled": node.enabled_count,
        "items": [_format_tool_node(t, concise=concise) for t in node.children],
    }
    if not concise:
        data["key"] = node.key
    return data


def format_tree(tree: Iterable[ServerNode], *, concise: bool = True) -> list[dict]:
    result = []
    for node in tree:
        entry: dict[str, Any] = {
            "id": node.server.id,
            "name": node.server.name,
            "tools": node.count,
            "enabled": node.enabled_count,
            "categories": [_format_category_node(c, concise=concise) for c in node.children],
        }
        if not concise:
            entry["key"] = node.key
            entry["status"] = node.server.status
            entry["serverEnabled"] = node.server.is_enabled
        result.append(entry)
    return result


def format_outcome(outcome: Outcome, action: str, **extra: Any) -> dict:
    """Report an optimistic update as applied or rolled back."""
    data: dict[str, Any] = {"status": "ok" if outcome.ok else "rolled_back", "action": action}
    data.update(extra)
    if outcome.error is not None:
        data["error"] = outcome.error.message
    return data
