"""HTTP client for one console backend (the server/tool registry REST API)."""

from typing import Any, TypeVar

import httpx
import pydantic

from mcp_console.auth import build_auth_headers
from mcp_console.errors import RemoteError, TransportError
from mcp_console.models import (
    DiscoveryResult,
    Server,
    ServerCreate,
    ServerPage,
    ServerUpdate,
    ToolFilter,
    ToolPage,
)
from mcp_console.query import QueryState

TOOL_PAGE_SIZE = 100

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class ConsoleClient:
    """HTTP client for a single console backend."""

    def __init__(self, name: str, url: str, token: str = "", timeout: float = 10.0) -> None:
        self.name = name
        self.url = url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @property
    def _prefix(self) -> str:
        return f"[{self.name}] " if self.name != "default" else ""

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (or None).

        ``success: false`` bodies raise ``RemoteError`` whatever the status
        code; other HTTP or network failures raise ``TransportError``.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(
                    method,
                    f"{self.url}{path}",
                    headers=self._headers(),
                    params=params,
                    json=body,
                )
        except httpx.HTTPError as e:
            raise TransportError(self.handle_error(e)) from e

        payload = None
        ct = resp.headers.get("content-type", "")
        if ct.startswith("application/json") and resp.content:
            try:
                payload = resp.json()
            except ValueError:
                payload = None

        if isinstance(payload, dict) and payload.get("success") is False:
            detail = payload.get("error") or payload.get("message") or f"HTTP {resp.status_code}"
            raise RemoteError(f"{self._prefix}{detail}", status_code=resp.status_code)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(self.handle_error(e), status_code=resp.status_code) from e
        return payload

    async def _call(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: Any = None,
    ) -> Any:
        """Request an enveloped endpoint and return its ``data`` member."""
        payload = await self._request(method, path, params=params, body=body)
        if isinstance(payload, dict) and "success" in payload:
            return payload.get("data")
        return payload

    def _parse(self, model: type[ModelT], data: Any) -> ModelT:
        """Validate a response body; a malformed body is a backend failure."""
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise RemoteError(
                f"{self._prefix}Unexpected {model.__name__} response from backend: "
                f"{e.error_count()} invalid field(s)"
            ) from e

    # -----------------------------------------------------------------
    #  Servers
    # -----------------------------------------------------------------

    async def list_servers(self, query: QueryState) -> ServerPage:
        data = await self._call("GET", "/mcp-servers", params=query.to_params())
        return self._parse(ServerPage, data or {})

    async def get_server(self, server_id: int) -> Server:
        return self._parse(Server, await self._call("GET", f"/mcp-servers/{server_id}"))

    async def create_server(self, req: ServerCreate) -> Server:
        data = await self._call("POST", "/mcp-servers", body=req.model_dump())
        return self._parse(Server, data)

    async def update_server(self, server_id: int, req: ServerUpdate) -> Server:
        data = await self._call(
            "PUT", f"/mcp-servers/{server_id}", body=req.model_dump(exclude_none=True)
        )
        return self._parse(Server, data)

    async def delete_server(self, server_id: int) -> None:
        await self._call("DELETE", f"/mcp-servers/{server_id}")

    async def toggle_server(self, server_id: int) -> Server:
        """Flip a server's enabled flag; returns the updated record."""
        return self._parse(Server, await self._call("PUT", f"/mcp-servers/{server_id}/toggle"))

    async def get_tags(self) -> list[str]:
        return await self._call("GET", "/mcp-servers/tags") or []

    async def discover_tools(self, server_id: int) -> DiscoveryResult:
        # Not enveloped: the body is the discovery result itself.
        payload = await self._request("POST", f"/mcp-servers/{server_id}/discover-tools")
        return self._parse(DiscoveryResult, payload or {"success": True})

    async def refresh_tools(self, server_id: int) -> DiscoveryResult:
        payload = await self._request("POST", f"/mcp-tools/refresh/{server_id}")
        return self._parse(DiscoveryResult, payload or {"success": True})

    # -----------------------------------------------------------------
    #  Tools
    # -----------------------------------------------------------------

    async def list_tools(
        self, tool_filter: ToolFilter | None = None, page: int = 1, size: int = TOOL_PAGE_SIZE
    ) -> ToolPage:
        params = (tool_filter or ToolFilter()).to_params()
        params.update({"page": page, "size": size})
        data = await self._call("GET", "/mcp-tools", params=params)
        return self._parse(ToolPage, data or {})

    async def list_all_tools(self, tool_filter: ToolFilter | None = None) -> ToolPage:
        """Walk every page of the tool list (the backend caps page size)."""
        page = await self.list_tools(tool_filter, page=1)
        tools = list(page.tools)
        n = 1
        while page.tools and len(tools) < page.total:
            n += 1
            page = await self.list_tools(tool_filter, page=n)
            tools.extend(page.tools)
        return ToolPage(tools=tools, total=max(page.total, len(tools)))

    async def update_tool(
        self, tool_id: int, *, is_enabled: bool | None = None, category: str | None = None
    ) -> None:
        body: dict[str, Any] = {}
        if is_enabled is not None:
            body["is_enabled"] = is_enabled
        if category is not None:
            body["category"] = category
        await self._call("PUT", f"/mcp-tools/{tool_id}", body=body)

    async def batch_update_tools(
        self, tool_ids: list[int], *, is_enabled: bool | None = None, category: str | None = None
    ) -> None:
        body: dict[str, Any] = {"tool_ids": list(tool_ids)}
        if is_enabled is not None:
            body["is_enabled"] = is_enabled
        if category is not None:
            body["category"] = category
        await self._call("PUT", "/mcp-tools/batch", body=body)

    async def list_categories(self, server_id: int | None = None) -> list[str]:
        params = {"server_id": server_id} if server_id else None
        return await self._call("GET", "/mcp-tools/categories", params=params) or []

    # -----------------------------------------------------------------
    #  Misc
    # -----------------------------------------------------------------

    async def health(self) -> Any:
        return await self._call("GET", "/health")

    async def test_connection(
        self, url: str, auth_type: str = "none", auth_config: Any = None
    ) -> bool:
        """Probe a managed server directly. Any response below 500 counts as reachable."""
        headers = build_auth_headers(auth_type, auth_config)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, headers=headers)
        except httpx.HTTPError:
            return False
        return resp.status_code < 500

    def handle_error(self, e: Exception) -> str:
        """Consistent error formatting referencing this instance."""
        prefix = self._prefix
        if isinstance(e, httpx.HTTPStatusError):
            status = e.response.status_code
            if status == 401:
                return f"{prefix}Error 401: Unauthorized. Check the token for instance '{self.name}'."
            if status == 403:
                return f"{prefix}Error 403: Forbidden. Token may lack permissions."
            if status == 404:
                return f"{prefix}Error 404: Not found. Check the server/tool ID. Detail: {e.response.text}"
            return f"{prefix}Error {status}: {e.response.text}"
        if isinstance(e, httpx.ConnectError):
            return f"{prefix}Error: Cannot connect to console backend at {self.url}. Is it running?"
        if isinstance(e, httpx.TimeoutException):
            return f"{prefix}Error: Request timed out. Backend may be busy or unreachable."
        return f"{prefix}Error: {type(e).__name__}: {e}"
