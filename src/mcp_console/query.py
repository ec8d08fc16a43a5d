"""Server list query state and its pure transition functions.

A ``QueryState`` is never edited in place. Every user-initiated change goes
through one of the ``with_*`` / sort functions below, which return a new
value. Narrowing the result set (search text, status filter, enabled filter)
always sends the user back to the first page.
"""

from collections.abc import Sequence
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict

from mcp_console.errors import ValidationError

SortField = Literal["created_at", "updated_at", "name"]
SortDir = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = get_args(SortField)
SORT_DIRS: tuple[str, ...] = get_args(SortDir)
STATUSES: tuple[str, ...] = ("active", "inactive", "error")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class QueryState(BaseModel):
    """Page, filter and sort parameters for one server list request."""

    model_config = ConfigDict(frozen=True, extra="forbid")
    page: int = 1
    size: int = DEFAULT_PAGE_SIZE
    search: str | None = None
    status: str | None = None
    enabled: bool | None = None
    order_by: str = "created_at"
    order_dir: str = "desc"

    def validate_request(self) -> None:
        """Raise ``ValidationError`` if this query cannot be sent to the backend."""
        if self.page < 1:
            raise ValidationError(f"page must be >= 1, got {self.page}")
        if not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValidationError(f"size must be between 1 and {MAX_PAGE_SIZE}, got {self.size}")
        if self.status is not None and self.status not in STATUSES:
            raise ValidationError(f"Unknown status filter '{self.status}'. Expected one of {list(STATUSES)}")
        if self.order_by not in SORT_FIELDS:
            raise ValidationError(f"Unknown sort field '{self.order_by}'. Expected one of {list(SORT_FIELDS)}")
        if self.order_dir not in SORT_DIRS:
            raise ValidationError(f"Unknown sort direction '{self.order_dir}'")

    def to_params(self) -> dict[str, Any]:
        """Render as backend query parameters, omitting unset filters."""
        params: dict[str, Any] = {
            "page": self.page,
            "size": self.size,
            "order_by": self.order_by,
            "order_dir": self.order_dir,
        }
        if self.search:
            params["search"] = self.search
        if self.status:
            params["status"] = self.status
        if self.enabled is not None:
            params["enabled"] = str(self.enabled).lower()
        return params


def _replace(query: QueryState, **changes: Any) -> QueryState:
    return query.model_copy(update=changes)


# ---------------------------------------------------------------------------
#  Filters (reset to the first page)
# ---------------------------------------------------------------------------


def with_search(query: QueryState, search: str | None) -> QueryState:
    search = (search or "").strip() or None
    return _replace(query, search=search, page=1)


def with_status_filter(query: QueryState, status: str | None) -> QueryState:
    status = status or None
    if status is not None and status not in STATUSES:
        raise ValidationError(f"Unknown status filter '{status}'. Expected one of {list(STATUSES)}")
    return _replace(query, status=status, page=1)


def with_enabled_filter(query: QueryState, enabled: bool | None) -> QueryState:
    return _replace(query, enabled=enabled, page=1)


# ---------------------------------------------------------------------------
#  Pagination
# ---------------------------------------------------------------------------


def with_page(query: QueryState, page: int) -> QueryState:
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    return _replace(query, page=page)


def with_page_size(query: QueryState, size: int) -> QueryState:
    if not 1 <= size <= MAX_PAGE_SIZE:
        raise ValidationError(f"size must be between 1 and {MAX_PAGE_SIZE}, got {size}")
    return _replace(query, size=size)


def with_pagination(query: QueryState, page: int, size: int) -> QueryState:
    """Apply a page and page-size change together, as a table pager emits them."""
    return with_page(with_page_size(query, size), page)


# ---------------------------------------------------------------------------
#  Sorting
# ---------------------------------------------------------------------------


def toggle_sort(query: QueryState, field: str) -> QueryState:
    """Make ``field`` the active sort column, or flip direction if it already is."""
    if field not in SORT_FIELDS:
        raise ValidationError(f"Unknown sort field '{field}'. Expected one of {list(SORT_FIELDS)}")
    if field == query.order_by:
        return _replace(query, order_dir="asc" if query.order_dir == "desc" else "desc")
    return _replace(query, order_by=field, order_dir="asc")


def apply_sorters(
    query: QueryState, sorters: Sequence[tuple[str, str | None]]
) -> QueryState:
    """Apply an explicit sort request of ``(field, direction)`` pairs.

    Only the first pair is honoured; multi-column sorting is not supported by
    the backend. A missing direction means descending. An empty request
    leaves the query unchanged.
    """
    if not sorters:
        return query
    field, direction = sorters[0]
    direction = direction or "desc"
    if field not in SORT_FIELDS:
        raise ValidationError(f"Unknown sort field '{field}'. Expected one of {list(SORT_FIELDS)}")
    if direction not in SORT_DIRS:
        raise ValidationError(f"Unknown sort direction '{direction}'")
    return _replace(query, order_by=field, order_dir=direction)
