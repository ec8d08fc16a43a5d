"""Flat servers + flat tools -> server / category / tool tree.

``build_tree`` is a pure function of its two inputs. Categories appear in the
order they are first seen among a server's tools, tools keep their input
order, and tools whose server is not in ``servers`` are left out.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Literal, Union

from mcp_console.models import Server, Tool


@dataclass(frozen=True)
class ToolNode:
    server_id: int
    category: str
    tool: Tool
    kind: Literal["tool"] = field(default="tool", init=False)

    @property
    def key(self) -> str:
        return f"tool-{self.server_id}-{self.category}-{self.tool.id}"

    @property
    def count(self) -> int:
        return 1

    @property
    def enabled_count(self) -> int:
        return 1 if self.tool.is_enabled else 0


@dataclass(frozen=True)
class CategoryNode:
    server_id: int
    category: str
    children: tuple[ToolNode, ...]
    kind: Literal["category"] = field(default="category", init=False)

    @property
    def key(self) -> str:
        return f"category-{self.server_id}-{self.category}"

    @property
    def count(self) -> int:
        return len(self.children)

    @property
    def enabled_count(self) -> int:
        return sum(child.enabled_count for child in self.children)

    @property
    def tool_ids(self) -> list[int]:
        return [child.tool.id for child in self.children]


@dataclass(frozen=True)
class ServerNode:
    server: Server
    children: tuple[CategoryNode, ...]
    kind: Literal["server"] = field(default="server", init=False)

    @property
    def server_id(self) -> int:
        return self.server.id

    @property
    def key(self) -> str:
        return f"server-{self.server.id}"

    @property
    def count(self) -> int:
        return sum(child.count for child in self.children)

    @property
    def enabled_count(self) -> int:
        return sum(child.enabled_count for child in self.children)


TreeNode = Union[ServerNode, CategoryNode, ToolNode]


def build_tree(servers: Iterable[Server], tools: Iterable[Tool]) -> list[ServerNode]:
    by_server: dict[int, dict[str, list[Tool]]] = {}
    for tool in tools:
        # dict insertion order gives first-seen category order per server
        by_server.setdefault(tool.server_id, {}).setdefault(tool.category, []).append(tool)

    tree = []
    for server in servers:
        categories = by_server.get(server.id, {})
        category_nodes = tuple(
            CategoryNode(
                server_id=server.id,
                category=category,
                children=tuple(ToolNode(server.id, category, t) for t in category_tools),
            )
            for category, category_tools in categories.items()
        )
        tree.append(ServerNode(server=server, children=category_nodes))
    return tree


def iter_nodes(tree: Iterable[ServerNode]) -> Iterator[TreeNode]:
    """Depth-first walk: each server, then its categories, then their tools."""
    for server_node in tree:
        yield server_node
        for category_node in server_node.children:
            yield category_node
            yield from category_node.children


def iter_tool_nodes(tree: Iterable[ServerNode]) -> Iterator[ToolNode]:
    for node in iter_nodes(tree):
        if isinstance(node, ToolNode):
            yield node


def find_node(tree: Iterable[ServerNode], key: str) -> TreeNode | None:
    for node in iter_nodes(tree):
        if node.key == key:
            return node
    return None
