"""Collection synchronizer: mirrors one remote page of servers locally.

The most recently *issued* query always wins. Each fetch takes a ticket from a
monotonically increasing counter; when a response arrives for a ticket that is
no longer the latest, it is dropped. Superseded requests are not cancelled,
their results are simply ignored.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple

from mcp_console.errors import ConsoleError
from mcp_console.models import Server, ServerPage
from mcp_console.query import QueryState

_LOGGER = logging.getLogger(__name__)

PageFetcher = Callable[[QueryState], Awaitable[ServerPage]]


class Snapshot(NamedTuple):
    items: tuple[Server, ...]
    total: int


class CollectionSynchronizer:
    """Keeps a local page of servers in step with a ``QueryState``."""

    def __init__(self, fetch_page: PageFetcher, query: QueryState | None = None) -> None:
        self._fetch_page = fetch_page
        self.query = query or QueryState()
        self.loading = False
        self.error: str | None = None
        self._snapshot = Snapshot((), 0)
        self._issued = 0
        self._loaded = False

    @property
    def items(self) -> tuple[Server, ...]:
        return self._snapshot.items

    @property
    def total(self) -> int:
        return self._snapshot.total

    @property
    def snapshot(self) -> Snapshot:
        """Items and total read together, from the same response."""
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def fetch(self, query: QueryState) -> bool:
        """Fetch ``query`` and make it current.

        Returns True when the response was applied, False when a newer query
        was issued before it resolved. Raises ``ValidationError`` before any
        remote call for a malformed query. Any failure of the latest query
        clears ``loading``, is recorded in ``error`` and is re-raised.
        """
        query.validate_request()
        self._issued += 1
        ticket = self._issued
        self.query = query
        self.loading = True
        try:
            page = await self._fetch_page(query)
        except Exception as exc:
            if ticket != self._issued:
                _LOGGER.debug(f"Discarding failure of superseded server query #{ticket}: {exc}")
                return False
            self.error = exc.message if isinstance(exc, ConsoleError) else f"{type(exc).__name__}: {exc}"
            _LOGGER.warning(f"Server list fetch failed: {self.error}")
            raise
        finally:
            if ticket == self._issued:
                self.loading = False
        if ticket != self._issued:
            _LOGGER.debug(f"Discarding stale server page for query #{ticket} (latest #{self._issued})")
            return False
        self._snapshot = Snapshot(tuple(page.servers), page.total)
        self._loaded = True
        self.error = None
        return True

    async def apply(self, transition: Callable[..., QueryState], *args: Any) -> bool:
        """Derive a new query from the current one and fetch it."""
        return await self.fetch(transition(self.query, *args))

    async def refresh(self) -> bool:
        return await self.fetch(self.query)

    def get_item(self, server_id: int) -> Server | None:
        for server in self._snapshot.items:
            if server.id == server_id:
                return server
        return None

    def patch_item(self, server_id: int, **changes: Any) -> bool:
        """Replace one held record with an updated copy. False if not on this page."""
        items = list(self._snapshot.items)
        for i, server in enumerate(items):
            if server.id == server_id:
                items[i] = server.model_copy(update=changes)
                self._snapshot = Snapshot(tuple(items), self._snapshot.total)
                return True
        return False
