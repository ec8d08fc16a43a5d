"""Enable/disable tools and servers with optimistic local updates.

``BatchStateMutator`` resolves a scope (one tool, a category of a server, or
every tool of a server) against the tool collection as it is *now*, flips
every resolved tool locally, then confirms with the backend. On failure every
affected tool goes back to the value it had before the call.

Overlapping calls are not serialised: the local flag reflects whichever call
wrote it last, and a rollback restores the value seen when that call started.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol, Union

from mcp_console.errors import ValidationError
from mcp_console.models import Tool
from mcp_console.optimistic import Outcome, optimistic

_LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
#  Scopes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolTarget:
    tool_id: int


@dataclass(frozen=True)
class CategoryTarget:
    server_id: int
    category: str


@dataclass(frozen=True)
class ServerTarget:
    server_id: int


ToolScope = Union[ToolTarget, CategoryTarget, ServerTarget]


# ---------------------------------------------------------------------------
#  Local tool collection
# ---------------------------------------------------------------------------


class ToolCollection:
    """Ordered local copy of the backend's tools, keyed by id."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[int, Tool] = {t.id: t for t in tools}
        self.version = 0

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    @property
    def items(self) -> list[Tool]:
        return list(self._tools.values())

    def get(self, tool_id: int) -> Tool | None:
        return self._tools.get(tool_id)

    def replace(self, tools: Iterable[Tool]) -> None:
        self._tools = {t.id: t for t in tools}
        self.version += 1

    def resolve(self, scope: ToolScope) -> list[int]:
        """Concrete tool ids covered by ``scope`` right now."""
        if isinstance(scope, ToolTarget):
            if scope.tool_id not in self._tools:
                raise ValidationError(f"Tool {scope.tool_id} is not loaded.")
            return [scope.tool_id]
        if isinstance(scope, CategoryTarget):
            return [
                t.id for t in self._tools.values()
                if t.server_id == scope.server_id and t.category == scope.category
            ]
        if isinstance(scope, ServerTarget):
            return [t.id for t in self._tools.values() if t.server_id == scope.server_id]
        raise ValidationError(f"Unsupported tool scope: {scope!r}")

    def set_enabled(self, tool_ids: Iterable[int], enabled: bool) -> dict[int, bool]:
        """Set the flag on every id, returning the previous values."""
        previous = {}
        for tool_id in tool_ids:
            tool = self._tools.get(tool_id)
            if tool is None:
                continue
            previous[tool_id] = tool.is_enabled
            self._tools[tool_id] = tool.model_copy(update={"is_enabled": enabled})
        self.version += 1
        return previous

    def restore(self, previous: dict[int, bool]) -> None:
        for tool_id, enabled in previous.items():
            tool = self._tools.get(tool_id)
            if tool is not None:
                self._tools[tool_id] = tool.model_copy(update={"is_enabled": enabled})
        self.version += 1


# ---------------------------------------------------------------------------
#  Mutators
# ---------------------------------------------------------------------------


class ToolUpdater(Protocol):
    async def update_tool(self, tool_id: int, *, is_enabled: bool | None = None,
                          category: str | None = None) -> None: ...

    async def batch_update_tools(self, tool_ids: list[int], *, is_enabled: bool | None = None,
                                 category: str | None = None) -> None: ...


class BatchStateMutator:
    def __init__(self, remote: ToolUpdater, tools: ToolCollection) -> None:
        self.remote = remote
        self.tools = tools

    async def set_enabled(self, scope: ToolScope, enabled: bool) -> Outcome:
        tool_ids = self.tools.resolve(scope)
        if not tool_ids:
            _LOGGER.debug(f"{scope!r} resolved to no tools; nothing to update")
            return Outcome(ok=True, value=[])

        previous: dict[int, bool] = {}

        def apply() -> None:
            previous.update(self.tools.set_enabled(tool_ids, enabled))

        def invert() -> None:
            self.tools.restore(previous)

        async def remote_call() -> list[int]:
            if isinstance(scope, ToolTarget):
                await self.remote.update_tool(scope.tool_id, is_enabled=enabled)
            else:
                await self.remote.batch_update_tools(tool_ids, is_enabled=enabled)
            return tool_ids

        _LOGGER.info(f"Setting enabled={enabled} on {len(tool_ids)} tool(s) for {scope!r}")
        return await optimistic(apply, invert, remote_call)


class ToggleReconciler:
    """Single-entity enabled flip with rollback.

    ``read``/``write`` access the local flag. ``remote`` is awaited with the
    id and desired flag and may return the acknowledged record; if that record
    carries ``is_enabled`` it is written back as the final value.
    """

    def __init__(
        self,
        read: Callable[[int], bool | None],
        write: Callable[[int, bool], None],
        remote: Callable[[int, bool], Awaitable[Any]],
    ) -> None:
        self._read = read
        self._write = write
        self._remote = remote

    async def set_enabled(self, entity_id: int, enabled: bool) -> Outcome:
        current = self._read(entity_id)
        if current is None:
            raise ValidationError(f"Entity {entity_id} is not loaded.")

        async def remote_call() -> Any:
            record = await self._remote(entity_id, enabled)
            acknowledged = getattr(record, "is_enabled", None)
            if acknowledged is not None and acknowledged != enabled:
                _LOGGER.info(f"Backend acknowledged {entity_id} as enabled={acknowledged}")
            if acknowledged is not None:
                self._write(entity_id, acknowledged)
            return record

        return await optimistic(
            lambda: self._write(entity_id, enabled),
            lambda: self._write(entity_id, current),
            remote_call,
        )
