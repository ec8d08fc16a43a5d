"""Server list, CRUD, enable toggle and connectivity tools."""

from mcp_console.console import encode_auth_config
from mcp_console.formatters import fmt, format_outcome, format_server, format_server_page, truncate
from mcp_console.models import (
    ConnectionCheckInput,
    CreateServerInput,
    ReadParams,
    ServerCreate,
    ServerQueryInput,
    ServerReadInput,
    ServerUpdate,
    ServerWriteInput,
    SetServerEnabledInput,
    UpdateServerInput,
)
from mcp_console.query import (
    QueryState,
    toggle_sort,
    with_enabled_filter,
    with_page,
    with_page_size,
    with_search,
    with_status_filter,
)
from mcp_console.registry import get_instance, get_session, handle_error_global
from mcp_console.server import mcp

_ENABLED_FILTER = {"enabled": True, "disabled": False, "any": None}


def next_query(query: QueryState, params: ServerQueryInput) -> QueryState:
    """Apply the requested changes in a fixed order: filters, page size, page, sort."""
    if params.search is not None:
        query = with_search(query, params.search)
    if params.status is not None:
        query = with_status_filter(query, None if params.status == "any" else params.status)
    if params.enabled is not None:
        query = with_enabled_filter(query, _ENABLED_FILTER[params.enabled])
    if params.size is not None:
        query = with_page_size(query, params.size)
    if params.page is not None:
        query = with_page(query, params.page)
    if params.sort_by is not None:
        query = toggle_sort(query, params.sort_by)
    return query


@mcp.tool(
    name="console_list_servers",
    annotations={
        "title": "List Registered Servers",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
async def console_list_servers(params: ServerQueryInput) -> str:
    """Page through registered MCP servers.

    The search/filter/sort/page state is remembered between calls: pass only
    what should change. Changing search or a filter returns to page 1;
    repeating sort_by on the active column flips the direction.
    """
    try:
        session = get_session(params.instance)
        await session.query_servers(next_query(session.servers.query, params))
        return truncate(fmt(format_server_page(session.servers, concise=params.concise), concise=params.concise))
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_get_server",
    annotations={
        "title": "Get Server Details",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_get_server(params: ServerReadInput) -> str:
    """Full record of one registered server."""
    try:
        client = get_instance(params.instance)
        server = await client.get_server(params.server_id)
        return fmt(format_server(server, concise=params.concise), concise=params.concise)
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_create_server",
    annotations={
        "title": "Register Server",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
async def console_create_server(params: CreateServerInput) -> str:
    """Register a new MCP server. It starts inactive until the backend connects to it."""
    try:
        session = get_session(params.instance)
        server = await session.create_server(ServerCreate(
            name=params.name,
            description=params.description,
            url=params.url,
            auth_type=params.auth_type,
            auth_config=encode_auth_config(params.auth_config),
            tags=",".join(params.tags),
        ))
        return fmt({"status": "created", "server": format_server(server, concise=False)})
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_update_server",
    annotations={
        "title": "Update Server",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_update_server(params: UpdateServerInput) -> str:
    """Replace a server's name, URL, auth settings, tags and optionally its enabled flag."""
    try:
        session = get_session(params.instance)
        server = await session.update_server(params.server_id, ServerUpdate(
            name=params.name,
            description=params.description,
            url=params.url,
            auth_type=params.auth_type,
            auth_config=encode_auth_config(params.auth_config),
            tags=",".join(params.tags),
            is_enabled=params.is_enabled,
        ))
        return fmt({"status": "updated", "server": format_server(server, concise=False)})
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_delete_server",
    annotations={
        "title": "Delete Server",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_delete_server(params: ServerWriteInput) -> str:
    """Remove a registered server."""
    try:
        session = get_session(params.instance)
        await session.delete_server(params.server_id)
        return fmt({"status": "deleted", "serverId": params.server_id})
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_set_server_enabled",
    annotations={
        "title": "Enable/Disable Server",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_set_server_enabled(params: SetServerEnabledInput) -> str:
    """Enable or disable a server. The local view updates immediately and is rolled back on failure."""
    try:
        session = get_session(params.instance)
        outcome = await session.set_server_enabled(params.server_id, params.enabled)
        data = format_outcome(
            outcome,
            "enable" if params.enabled else "disable",
            serverId=params.server_id,
        )
        if outcome.ok and outcome.value is not None:
            data["server"] = format_server(outcome.value)
        return fmt(data)
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_server_tags",
    annotations={
        "title": "List Server Tags",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def console_server_tags(params: ReadParams) -> str:
    """All tags in use across registered servers."""
    try:
        client = get_instance(params.instance)
        return fmt(await client.get_tags(), concise=params.concise)
    except Exception as e:
        return handle_error_global(e)


@mcp.tool(
    name="console_test_connection",
    annotations={
        "title": "Test Server Connectivity",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def console_test_connection(params: ConnectionCheckInput) -> str:
    """Check that a server URL answers with the given credentials before registering it."""
    try:
        session = get_session(params.instance)
        ok = await session.test_connection(params.url, params.auth_type, params.auth_config)
        return fmt({"url": params.url, "reachable": ok})
    except Exception as e:
        return handle_error_global(e)
