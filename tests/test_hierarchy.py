"""Tests for the server / category / tool tree builder."""

from mcp_console.hierarchy import (
    CategoryNode,
    ServerNode,
    ToolNode,
    build_tree,
    find_node,
    iter_tool_nodes,
)
from tests.conftest import server, tool


def sample():
    servers = [server(10, "alpha"), server(20, "beta"), server(30, "empty")]
    tools = [
        tool(1, 10, "net"),
        tool(2, 20, "files"),
        tool(3, 10, "db", enabled=True),
        tool(4, 10, "net", enabled=True),
        tool(5, 99, "net"),  # orphan
        tool(6, 20, "files"),
        tool(7, 10, "alpha-first"),
    ]
    return servers, tools


class TestStructure:
    def test_server_order_follows_input(self):
        servers, tools = sample()
        tree = build_tree(servers, tools)
        assert [n.server.id for n in tree] == [10, 20, 30]
        assert all(isinstance(n, ServerNode) for n in tree)

    def test_categories_in_first_seen_order(self):
        servers, tools = sample()
        alpha = build_tree(servers, tools)[0]
        # not alphabetical
        assert [c.category for c in alpha.children] == ["net", "db", "alpha-first"]

    def test_tools_keep_input_order(self):
        servers, tools = sample()
        net = build_tree(servers, tools)[0].children[0]
        assert net.tool_ids == [1, 4]

    def test_server_without_tools(self):
        servers, tools = sample()
        empty = build_tree(servers, tools)[2]
        assert empty.children == ()
        assert empty.count == 0

    def test_orphans_dropped(self):
        servers, tools = sample()
        tree = build_tree(servers, tools)
        assert 5 not in [n.tool.id for n in iter_tool_nodes(tree)]

    def test_no_servers(self):
        _, tools = sample()
        assert build_tree([], tools) == []


class TestPartition:
    def test_every_tool_under_its_server_and_category(self):
        servers, tools = sample()
        for server_node in build_tree(servers, tools):
            expected = [t.id for t in tools if t.server_id == server_node.server.id]
            seen = []
            for category_node in server_node.children:
                for tool_node in category_node.children:
                    assert tool_node.tool.server_id == server_node.server.id
                    assert tool_node.tool.category == category_node.category
                    seen.append(tool_node.tool.id)
            assert sorted(seen) == sorted(expected)
            assert len(seen) == len(set(seen))


class TestCountsAndKeys:
    def test_counts(self):
        servers, tools = sample()
        alpha = build_tree(servers, tools)[0]
        assert alpha.count == 4
        assert alpha.enabled_count == 2
        assert [(c.count, c.enabled_count) for c in alpha.children] == [(2, 1), (1, 1), (1, 0)]

    def test_keys(self):
        servers, tools = sample()
        alpha = build_tree(servers, tools)[0]
        category = alpha.children[0]
        leaf = category.children[0]
        assert alpha.key == "server-10"
        assert category.key == "category-10-net"
        assert leaf.key == "tool-10-net-1"
        assert (alpha.kind, category.kind, leaf.kind) == ("server", "category", "tool")

    def test_find_node(self):
        servers, tools = sample()
        tree = build_tree(servers, tools)
        assert isinstance(find_node(tree, "category-20-files"), CategoryNode)
        assert isinstance(find_node(tree, "tool-10-db-3"), ToolNode)
        assert find_node(tree, "server-99") is None


class TestDeterminism:
    def test_rebuild_is_identical(self):
        servers, tools = sample()
        first = build_tree(servers, tools)
        second = build_tree(servers, tools)
        assert [n.key for n in first] == [n.key for n in second]
        assert [c.key for n in first for c in n.children] == [c.key for n in second for c in n.children]
        assert [t.key for t in iter_tool_nodes(first)] == [t.key for t in iter_tool_nodes(second)]

    def test_does_not_mutate_inputs(self):
        servers, tools = sample()
        before = [t.model_dump() for t in tools]
        build_tree(servers, tools)
        assert [t.model_dump() for t in tools] == before
