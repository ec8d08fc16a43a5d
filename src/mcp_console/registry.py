"""Instance registry: load console backends from environment variables."""

import json
import logging
import os

from mcp_console.client import ConsoleClient
from mcp_console.console import ConsoleSession
from mcp_console.errors import ConsoleError, TransportError

_LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 10.0


def _load_timeout() -> float:
    raw = os.environ.get("MCP_CONSOLE_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid MCP_CONSOLE_TIMEOUT: {raw!r}") from exc
    if timeout <= 0:
        raise ValueError("MCP_CONSOLE_TIMEOUT must be positive.")
    return timeout


def load_instances() -> dict[str, ConsoleClient]:
    """Build instance registry from environment variables.

    Supports two modes:
      - Multi-instance via MCP_CONSOLE_INSTANCES (JSON object)
      - Single-instance via MCP_CONSOLE_URL + MCP_CONSOLE_TOKEN
    """
    timeout = _load_timeout()
    instances_json = os.environ.get("MCP_CONSOLE_INSTANCES", "").strip()

    if instances_json:
        try:
            cfg = json.loads(instances_json)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid MCP_CONSOLE_INSTANCES JSON: {exc}") from exc
        if not isinstance(cfg, dict) or not cfg:
            raise ValueError("MCP_CONSOLE_INSTANCES must be a non-empty JSON object.")
        instances: dict[str, ConsoleClient] = {}
        for name, entry in cfg.items():
            if not isinstance(entry, dict):
                raise ValueError(f"Instance '{name}' config must be a JSON object.")
            url = entry.get("url", DEFAULT_URL)
            token = entry.get("token", "")
            instances[name] = ConsoleClient(name, url, token, timeout=timeout)
        return instances

    url = os.environ.get("MCP_CONSOLE_URL", DEFAULT_URL)
    token = os.environ.get("MCP_CONSOLE_TOKEN", "")
    return {"default": ConsoleClient("default", url, token, timeout=timeout)}


# Module-level registry, initialised at import time.
_instances: dict[str, ConsoleClient] = load_instances()
_sessions: dict[str, ConsoleSession] = {}


def get_instance(instance: str | None = None) -> ConsoleClient:
    """Resolve an instance by name, or auto-select when there is only one."""
    if instance is None:
        if len(_instances) == 1:
            return next(iter(_instances.values()))
        names = list(_instances.keys())
        raise ValueError(
            f"Multiple instances configured ({names}). "
            "Specify 'instance' parameter to choose one."
        )
    if instance not in _instances:
        raise ValueError(
            f"Instance '{instance}' not found. Available: {list(_instances.keys())}"
        )
    return _instances[instance]


def get_session(instance: str | None = None) -> ConsoleSession:
    """Session for an instance, created on first use and kept for the process."""
    client = get_instance(instance)
    session = _sessions.get(client.name)
    if session is None:
        _LOGGER.debug(f"Creating console session for instance '{client.name}'")
        session = _sessions[client.name] = ConsoleSession(client)
    return session


def get_all_instances() -> dict[str, ConsoleClient]:
    """Return the full instance registry."""
    return _instances


def handle_error_global(e: Exception) -> str:
    """Render any failure raised while serving a tool call."""
    if isinstance(e, TransportError):
        # already formatted by ConsoleClient.handle_error
        return e.message
    if isinstance(e, (ValueError, ConsoleError)):
        return f"Error: {e}"
    _LOGGER.exception("Unexpected error while handling a tool call")
    return f"Error: {type(e).__name__}: {e}"


def reload_instances() -> None:
    """Re-read environment and rebuild the instance registry (for testing)."""
    global _instances
    _instances = load_instances()
    _sessions.clear()
