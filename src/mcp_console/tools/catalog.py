"""Tool catalog: load, tree view, enable/disable at any level, discovery."""

from mcp_console.formatters import fmt, format_outcome, format_tool, format_tree, truncate
from mcp_console.models import (
    CategoriesInput,
    LoadToolsInput,
    ServerWriteInput,
    SetCategoryEnabledInput,
    SetServerToolsEnabledInput,
    SetToolCategoryInput,
    SetToolEnabledInput,
    ToolFilter,
    ToolTreeInput,
)
from mcp_console.mutations import CategoryTarget, ServerTarget, ToolTarget
from mcp_console.registry import get_session, handle_error_global
from mcp_console.server import mcp


def _action(enabled: bool) -> str:
    return "enable" if enabled else "disable"


# =====================================================================
#  Reading
# =====================================================================


@mcp.tool(
    name="console_load_tools",
    annotations={
        "title": "Load Tools",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_load_tools(params: LoadToolsInput) -> str:
    """Reload the tool list from the backend with the given filters.

    The filters stay in effect for the tree and for later reloads.
    """
    try:
        session = get_session(params.instance)
        await session.load_tools(ToolFilter(
            server_id=params.server_id,
            category=params.category or None,
            search=params.search or None,
            enabled=params.enabled,
        ))
        tools = [format_tool(t, concise=params.concise) for t in session.tools.items]
        return truncate(fmt({"total": len(tools), "tools": tools}, concise=params.concise))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_tool_tree",
    annotations={
        "title": "Tool Tree (Server / Category / Tool)",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_tool_tree(params: ToolTreeInput) -> str:
    """Tools grouped by active server and by category, with enabled counts at each level."""
    try:
        session = get_session(params.instance)
        if params.reload:
            await session.reload()
        else:
            await session.ensure_loaded()
        return truncate(fmt(format_tree(session.tree, concise=params.concise), concise=params.concise))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_list_categories",
    annotations={
        "title": "List Tool Categories",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_list_categories(params: CategoriesInput) -> str:
    """Distinct tool categories, optionally for one server."""
    try:
        session = get_session(params.instance)
        return fmt(await session.load_categories(params.server_id), concise=params.concise)
    except Exception as e:
        return handle_error_global(e)


# =====================================================================
#  Enable / disable
# =====================================================================


@mcp.tool(
    name="console_set_tool_enabled",
    annotations={
        "title": "Enable/Disable Tool",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_set_tool_enabled(params: SetToolEnabledInput) -> str:
    """Enable or disable a single tool."""
    try:
        session = get_session(params.instance)
        await session.ensure_loaded()
        outcome = await session.set_tools_enabled(ToolTarget(params.tool_id), params.enabled)
        return fmt(format_outcome(outcome, _action(params.enabled), toolIds=[params.tool_id]))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_set_category_enabled",
    annotations={
        "title": "Enable/Disable Tool Category",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_set_category_enabled(params: SetCategoryEnabledInput) -> str:
    """Enable or disable every tool in one category of one server, as a single batch."""
    try:
        session = get_session(params.instance)
        await session.ensure_loaded()
        scope = CategoryTarget(params.server_id, params.category)
        tool_ids = session.tools.resolve(scope)
        outcome = await session.set_tools_enabled(scope, params.enabled)
        return fmt(format_outcome(
            outcome,
            _action(params.enabled),
            serverId=params.server_id,
            category=params.category,
            toolIds=tool_ids,
        ))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_set_server_tools_enabled",
    annotations={
        "title": "Enable/Disable All Tools of a Server",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_set_server_tools_enabled(params: SetServerToolsEnabledInput) -> str:
    """Enable or disable every loaded tool of a server, as a single batch."""
    try:
        session = get_session(params.instance)
        await session.ensure_loaded()
        scope = ServerTarget(params.server_id)
        tool_ids = session.tools.resolve(scope)
        outcome = await session.set_tools_enabled(scope, params.enabled)
        return fmt(format_outcome(
            outcome, _action(params.enabled), serverId=params.server_id, toolIds=tool_ids,
        ))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_set_tool_category",
    annotations={
        "title": "Move Tools to Category",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_set_tool_category(params: SetToolCategoryInput) -> str:
    """Assign a category to one or more tools."""
    try:
        session = get_session(params.instance)
        await session.set_tool_category(params.tool_ids, params.category)
        return fmt({"status": "ok", "category": params.category, "toolIds": params.tool_ids})
    except Exception as e:
        return handle_error_global(e)


# =====================================================================
#  Discovery
# =====================================================================


@mcp.tool(
    name="console_discover_tools",
    annotations={
        "title": "Discover Server Tools",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def console_discover_tools(params: ServerWriteInput) -> str:
    """Ask the backend to enumerate a server's tools, then reload the local tool list.

    The server must be active.
    """
    try:
        session = get_session(params.instance)
        result = await session.discover(params.server_id)
        return fmt({
            "serverId": params.server_id,
            "success": result.success,
            "toolsCount": result.tools_count,
            "message": result.message,
        })
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_refresh_tools",
    annotations={
        "title": "Refresh Server Tools",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def console_refresh_tools(params: ServerWriteInput) -> str:
    """Re-run discovery for a server through the backend's refresh endpoint."""
    try:
        session = get_session(params.instance)
        result = await session.refresh_tools(params.server_id)
        return fmt({
            "serverId": params.server_id,
            "success": result.success,
            "toolsCount": result.tools_count,
            "message": result.message,
        })
    except Exception as e:
        return handle_error_global(e)
