"""Tests for tool catalog tools: loading, tree view, toggles and discovery."""

import json

import pytest

from mcp_console.models import (
    CategoriesInput,
    LoadToolsInput,
    ServerWriteInput,
    SetCategoryEnabledInput,
    SetServerToolsEnabledInput,
    SetToolCategoryInput,
    SetToolEnabledInput,
    ToolTreeInput,
)
from mcp_console.registry import get_session, reload_instances
from tests.conftest import envelope, failure, make_server, make_server_page, make_tool, make_tool_page


@pytest.fixture(autouse=True)
def _setup(single_instance_env):
    reload_instances()
    yield
    reload_instances()


@pytest.fixture
def catalog(mock_api):
    """Two active servers with tools in several categories, plus one orphan."""
    mock_api.get("/mcp-servers").respond(json=make_server_page(
        [make_server(10, "alpha"), make_server(20, "beta")], size=100,
    ))
    mock_api.get("/mcp-tools", name="tools").respond(json=make_tool_page([
        make_tool(1, 10, "net"),
        make_tool(2, 20, "files", enabled=True),
        make_tool(3, 10, "db", enabled=True),
        make_tool(4, 10, "net"),
        make_tool(5, 99, "net"),
    ]))
    return mock_api


class TestLoadTools:
    async def test_filters_sent(self, mock_api):
        from mcp_console.tools.catalog import console_load_tools

        route = mock_api.get("/mcp-tools").respond(json=make_tool_page())
        result = json.loads(await console_load_tools(LoadToolsInput(server_id=10, enabled=False, category="")))
        params = route.calls[0].request.url.params
        assert params["server_id"] == "10"
        assert params["enabled"] == "false"
        assert "category" not in params
        assert result["total"] == 2
        assert result["tools"][0] == {"id": 1, "name": "tool_1", "category": "A", "enabled": False}


class TestToolTree:
    async def test_grouping(self, catalog):
        from mcp_console.tools.catalog import console_tool_tree

        tree = json.loads(await console_tool_tree(ToolTreeInput()))
        assert [s["name"] for s in tree] == ["alpha", "beta"]
        alpha = tree[0]
        assert [c["category"] for c in alpha["categories"]] == ["net", "db"]
        assert [t["id"] for t in alpha["categories"][0]["items"]] == [1, 4]
        assert (alpha["tools"], alpha["enabled"]) == (3, 1)
        all_ids = [t["id"] for s in tree for c in s["categories"] for t in c["items"]]
        assert 5 not in all_ids

    async def test_cached_unless_reload(self, catalog):
        from mcp_console.tools.catalog import console_tool_tree

        await console_tool_tree(ToolTreeInput())
        await console_tool_tree(ToolTreeInput())
        assert catalog["tools"].call_count == 1
        await console_tool_tree(ToolTreeInput(reload=True))
        assert catalog["tools"].call_count == 2


class TestCategories:
    async def test_list(self, mock_api):
        from mcp_console.tools.catalog import console_list_categories

        route = mock_api.get("/mcp-tools/categories").respond(json=envelope(["db", "net"]))
        assert json.loads(await console_list_categories(CategoriesInput(server_id=10))) == ["db", "net"]
        assert route.calls[0].request.url.params["server_id"] == "10"


class TestToggles:
    async def test_category_enable(self, catalog):
        from mcp_console.tools.catalog import console_set_category_enabled, console_tool_tree

        route = catalog.put("/mcp-tools/batch").respond(json={"success": True})
        result = json.loads(await console_set_category_enabled(
            SetCategoryEnabledInput(server_id=10, category="net", enabled=True)
        ))
        assert result["status"] == "ok"
        assert result["toolIds"] == [1, 4]
        assert json.loads(route.calls[0].request.content) == {"tool_ids": [1, 4], "is_enabled": True}

        tree = json.loads(await console_tool_tree(ToolTreeInput()))
        assert tree[0]["categories"][0]["enabled"] == 2

    async def test_category_failure_rolls_back(self, catalog):
        from mcp_console.tools.catalog import console_set_category_enabled

        catalog.put("/mcp-tools/batch").respond(status_code=500, json=failure("batch rejected"))
        result = json.loads(await console_set_category_enabled(
            SetCategoryEnabledInput(server_id=10, category="net", enabled=True)
        ))
        assert result["status"] == "rolled_back"
        assert result["error"] == "batch rejected"
        tools = get_session().tools
        assert not tools.get(1).is_enabled
        assert not tools.get(4).is_enabled

    async def test_empty_category(self, catalog):
        from mcp_console.tools.catalog import console_set_category_enabled

        route = catalog.put("/mcp-tools/batch").respond(json={"success": True})
        result = json.loads(await console_set_category_enabled(
            SetCategoryEnabledInput(server_id=10, category="missing", enabled=True)
        ))
        assert result["status"] == "ok"
        assert result["toolIds"] == []
        assert not route.called

    async def test_single_tool(self, catalog):
        from mcp_console.tools.catalog import console_set_tool_enabled

        route = catalog.put("/mcp-tools/3").respond(json={"success": True})
        result = json.loads(await console_set_tool_enabled(SetToolEnabledInput(tool_id=3, enabled=False)))
        assert result == {"status": "ok", "action": "disable", "toolIds": [3]}
        assert json.loads(route.calls[0].request.content) == {"is_enabled": False}
        assert get_session().tools.get(3).is_enabled is False

    async def test_unknown_tool(self, catalog):
        from mcp_console.tools.catalog import console_set_tool_enabled

        result = await console_set_tool_enabled(SetToolEnabledInput(tool_id=404, enabled=True))
        assert result.startswith("Error:")
        assert "404" in result

    async def test_server_tools(self, catalog):
        from mcp_console.tools.catalog import console_set_server_tools_enabled

        route = catalog.put("/mcp-tools/batch").respond(json={"success": True})
        result = json.loads(await console_set_server_tools_enabled(
            SetServerToolsEnabledInput(server_id=10, enabled=False)
        ))
        assert result["toolIds"] == [1, 3, 4]
        assert json.loads(route.calls[0].request.content)["tool_ids"] == [1, 3, 4]


class TestMoveCategory:
    async def test_batch_move(self, catalog):
        from mcp_console.tools.catalog import console_set_tool_category

        route = catalog.put("/mcp-tools/batch").respond(json={"success": True})
        result = json.loads(await console_set_tool_category(SetToolCategoryInput(tool_ids=[1, 4], category="edge")))
        assert result == {"status": "ok", "category": "edge", "toolIds": [1, 4]}
        assert json.loads(route.calls[0].request.content) == {"tool_ids": [1, 4], "category": "edge"}


class TestDiscovery:
    async def test_discover(self, catalog):
        from mcp_console.tools.catalog import console_discover_tools

        catalog.post("/mcp-servers/10/discover-tools").respond(json={
            "success": True, "message": "found 3", "tools_count": 3,
        })
        result = json.loads(await console_discover_tools(ServerWriteInput(server_id=10)))
        assert result == {"serverId": 10, "success": True, "toolsCount": 3, "message": "found 3"}
        assert len(get_session().tools) == 5

    async def test_discover_inactive(self, catalog):
        from mcp_console.tools.catalog import console_discover_tools

        catalog.post("/mcp-servers/20/discover-tools").respond(
            status_code=400, json={"success": False, "message": "server not active"}
        )
        result = await console_discover_tools(ServerWriteInput(server_id=20))
        assert result == "Error: server not active"

    async def test_refresh(self, catalog):
        from mcp_console.tools.catalog import console_refresh_tools

        catalog.post("/mcp-tools/refresh/10").respond(json={"success": True, "message": "refreshed"})
        result = json.loads(await console_refresh_tools(ServerWriteInput(server_id=10)))
        assert result["success"] is True
        assert result["message"] == "refreshed"
