"""Per-backend session: the server list, the tool tree and the mutators."""

import json
import logging
from typing import Any

from mcp_console.client import ConsoleClient
from mcp_console.errors import ConsoleError, ValidationError
from mcp_console.hierarchy import ServerNode, build_tree
from mcp_console.models import (
    DiscoveryResult,
    Server,
    ServerCreate,
    ServerUpdate,
    ToolFilter,
)
from mcp_console.mutations import (
    BatchStateMutator,
    ToggleReconciler,
    ToolCollection,
    ToolScope,
)
from mcp_console.optimistic import Outcome
from mcp_console.query import QueryState
from mcp_console.sync import CollectionSynchronizer

_LOGGER = logging.getLogger(__name__)

# The tool tree shows servers that can actually serve tools.
TREE_SERVER_QUERY = QueryState(page=1, size=100, status="active", enabled=True, order_by="name", order_dir="asc")


class ConsoleSession:
    """All client-side state held for one console backend."""

    def __init__(self, client: ConsoleClient) -> None:
        self.client = client
        self.servers = CollectionSynchronizer(client.list_servers)
        self.tree_servers = CollectionSynchronizer(client.list_servers, TREE_SERVER_QUERY)
        self.tools = ToolCollection()
        self.tool_filter = ToolFilter()
        self.categories: list[str] = []
        self.batch = BatchStateMutator(client, self.tools)
        self.server_toggle = ToggleReconciler(
            self._read_server_enabled, self._write_server_enabled, self._remote_set_server_enabled
        )
        self._tree: list[ServerNode] = []
        self._tree_version: tuple[int, int] | None = None
        self._servers_version = 0

    # -----------------------------------------------------------------
    #  Server list
    # -----------------------------------------------------------------

    async def query_servers(self, query: QueryState) -> bool:
        return await self.servers.fetch(query)

    async def create_server(self, req: ServerCreate) -> Server:
        server = await self.client.create_server(req)
        _LOGGER.info(f"Created server {server.id} ({server.name})")
        await self._refresh_servers_after_write()
        return server

    async def update_server(self, server_id: int, req: ServerUpdate) -> Server:
        server = await self.client.update_server(server_id, req)
        await self._refresh_servers_after_write()
        return server

    async def delete_server(self, server_id: int) -> None:
        await self.client.delete_server(server_id)
        _LOGGER.info(f"Deleted server {server_id}")
        await self._refresh_servers_after_write()

    async def _refresh_servers_after_write(self) -> None:
        # The write already happened; a failed refresh stays in servers.error.
        try:
            await self.servers.refresh()
        except ConsoleError as exc:
            _LOGGER.warning(f"Server list refresh after write failed: {exc}")

    async def set_server_enabled(self, server_id: int, enabled: bool) -> Outcome:
        if self._read_server_enabled(server_id) is None:
            # Nothing held locally, so there is nothing to update optimistically.
            try:
                server = await self._remote_set_server_enabled(server_id, enabled)
            except ConsoleError as exc:
                return Outcome(ok=False, error=exc)
            return Outcome(ok=True, value=server)
        return await self.server_toggle.set_enabled(server_id, enabled)

    def _read_server_enabled(self, server_id: int) -> bool | None:
        server = self.servers.get_item(server_id) or self.tree_servers.get_item(server_id)
        return None if server is None else server.is_enabled

    def _write_server_enabled(self, server_id: int, enabled: bool) -> None:
        self.servers.patch_item(server_id, is_enabled=enabled)
        if self.tree_servers.patch_item(server_id, is_enabled=enabled):
            self._servers_version += 1

    async def _remote_set_server_enabled(self, server_id: int, enabled: bool) -> Server:
        # The backend only offers a flip, so read its current value first.
        server = await self.client.get_server(server_id)
        if server.is_enabled == enabled:
            return server
        return await self.client.toggle_server(server_id)

    # -----------------------------------------------------------------
    #  Tool tree
    # -----------------------------------------------------------------

    async def load_tree_servers(self) -> bool:
        applied = await self.tree_servers.refresh()
        if applied:
            self._servers_version += 1
        return applied

    async def load_tools(self, tool_filter: ToolFilter | None = None) -> int:
        if tool_filter is not None:
            self.tool_filter = tool_filter
        page = await self.client.list_all_tools(self.tool_filter)
        self.tools.replace(page.tools)
        return len(self.tools)

    async def load_categories(self, server_id: int | None = None) -> list[str]:
        self.categories = await self.client.list_categories(server_id)
        return self.categories

    async def reload(self) -> None:
        await self.load_tree_servers()
        await self.load_tools()

    async def ensure_loaded(self) -> None:
        """Load the tree inputs once; later calls reuse the local copies."""
        if not self.tree_servers.loaded:
            await self.load_tree_servers()
        if self.tools.version == 0:
            await self.load_tools()

    @property
    def tree(self) -> list[ServerNode]:
        version = (self._servers_version, self.tools.version)
        if version != self._tree_version:
            self._tree = build_tree(self.tree_servers.items, self.tools.items)
            self._tree_version = version
        return self._tree

    async def set_tools_enabled(self, scope: ToolScope, enabled: bool) -> Outcome:
        return await self.batch.set_enabled(scope, enabled)

    async def set_tool_category(self, tool_ids: list[int], category: str) -> None:
        if not tool_ids:
            raise ValidationError("No tools given.")
        if len(tool_ids) == 1:
            await self.client.update_tool(tool_ids[0], category=category)
        else:
            await self.client.batch_update_tools(tool_ids, category=category)
        await self._reload_tools_after_write()

    async def discover(self, server_id: int) -> DiscoveryResult:
        # A body with success false is raised as RemoteError by the client.
        result = await self.client.discover_tools(server_id)
        _LOGGER.info(f"Discovered {result.tools_count} tool(s) on server {server_id}")
        if await self._reload_tools_after_write():
            try:
                await self.load_categories(self.tool_filter.server_id)
            except ConsoleError as exc:
                _LOGGER.warning(f"Category reload after discovery failed: {exc}")
        return result

    async def refresh_tools(self, server_id: int) -> DiscoveryResult:
        result = await self.client.refresh_tools(server_id)
        await self._reload_tools_after_write()
        return result

    async def _reload_tools_after_write(self) -> bool:
        """Reload the tool list; False (and the previous list kept) on failure."""
        try:
            await self.load_tools()
        except ConsoleError as exc:
            _LOGGER.warning(f"Tool reload after write failed, keeping previous list: {exc}")
            return False
        return True

    async def test_connection(self, url: str, auth_type: str, auth_config: Any) -> bool:
        return await self.client.test_connection(url, auth_type, auth_config)


def encode_auth_config(auth_config: dict[str, Any]) -> str:
    """Serialise an auth payload the way the backend stores it."""
    return json.dumps(auth_config) if auth_config else ""
