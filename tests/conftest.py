"""Shared fixtures for MCP Console tests."""

import json

import pytest
import respx

from mcp_console.client import ConsoleClient
from mcp_console.models import Server, Tool

# ---------------------------------------------------------------------------
# Common backend response fixtures
# ---------------------------------------------------------------------------

BASE_URL = "http://localhost:8080/api"
TOKEN = "test-token-12345"
TIMESTAMP = "2025-01-01T12:00:00Z"


def make_server(
    server_id: int = 10,
    name: str = "k8s-tools",
    *,
    status: str = "active",
    enabled: bool = True,
    tags: str = "prod, k8s",
) -> dict:
    return {
        "id": server_id,
        "name": name,
        "description": f"{name} server",
        "url": f"http://{name}.local:9000/mcp",
        "auth_type": "none",
        "auth_config": "",
        "status": status,
        "is_enabled": enabled,
        "tags": tags,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
        "deleted_at": None,
    }


def make_tool(
    tool_id: int,
    server_id: int = 10,
    category: str = "A",
    *,
    enabled: bool = False,
    name: str | None = None,
) -> dict:
    return {
        "id": tool_id,
        "server_id": server_id,
        "name": name or f"tool_{tool_id}",
        "description": f"Tool {tool_id}",
        "category": category,
        "parameters": {"type": "object", "properties": {}},
        "is_enabled": enabled,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def server(*args, **kwargs) -> Server:
    return Server.model_validate(make_server(*args, **kwargs))


def tool(*args, **kwargs) -> Tool:
    return Tool.model_validate(make_tool(*args, **kwargs))


def envelope(data=None, *, message: str = "") -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def failure(error: str, message: str = "request failed") -> dict:
    return {"success": False, "message": message, "error": error}


def make_server_page(servers: list[dict] | None = None, *, total: int | None = None,
                     page: int = 1, size: int = 10) -> dict:
    if servers is None:
        servers = [make_server()]
    return envelope({
        "servers": servers,
        "total": len(servers) if total is None else total,
        "page": page,
        "size": size,
    })


def make_tool_page(tools: list[dict] | None = None, *, total: int | None = None) -> dict:
    if tools is None:
        tools = [make_tool(1), make_tool(2)]
    return envelope({
        "tools": tools,
        "total": len(tools) if total is None else total,
        "page": 1,
        "size": 100,
    })


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """A ConsoleClient for testing."""
    return ConsoleClient("test", BASE_URL, TOKEN)


@pytest.fixture
def single_instance_env(monkeypatch):
    """Set env vars for single-instance mode."""
    monkeypatch.setenv("MCP_CONSOLE_URL", BASE_URL)
    monkeypatch.setenv("MCP_CONSOLE_TOKEN", TOKEN)
    monkeypatch.delenv("MCP_CONSOLE_INSTANCES", raising=False)
    monkeypatch.delenv("MCP_CONSOLE_TIMEOUT", raising=False)


@pytest.fixture
def multi_instance_env(monkeypatch):
    """Set env vars for multi-instance mode."""
    instances = {
        "alpha": {"url": "http://alpha.local:8080/api", "token": "tok-alpha"},
        "beta": {"url": "http://beta.local:8080/api", "token": "tok-beta"},
    }
    monkeypatch.setenv("MCP_CONSOLE_INSTANCES", json.dumps(instances))
    monkeypatch.delenv("MCP_CONSOLE_URL", raising=False)
    monkeypatch.delenv("MCP_CONSOLE_TOKEN", raising=False)
    monkeypatch.delenv("MCP_CONSOLE_TIMEOUT", raising=False)


@pytest.fixture
def mock_api():
    """Activate respx mock for the default backend base URL.

    Pre-configures common routes so tools can call multiple endpoints.
    Returns the respx mock router for further customisation.
    """
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        router.get("/health").respond(json={"status": "ok"})
        router.get("/mcp-servers").respond(json=make_server_page())
        router.get("/mcp-servers/tags").respond(json=envelope(["prod", "k8s"]))
        router.get("/mcp-tools").respond(json=make_tool_page())
        router.get("/mcp-tools/categories").respond(json=envelope(["A"]))
        yield router


@pytest.fixture
def _setup_single_instance(single_instance_env):
    """Reload the registry with single-instance env, then restore after test."""
    from mcp_console import registry
    registry.reload_instances()
    yield
    registry.reload_instances()
