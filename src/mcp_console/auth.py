"""Authentication: outgoing headers for managed servers, incoming bearer check."""

import base64
import hmac
import json
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from mcp_console.errors import ValidationError

UNAUTHENTICATED_PATHS = frozenset({"/health"})


def load_auth_config(auth_config: str | dict[str, Any] | None) -> dict[str, Any]:
    """Decode a server's stored ``auth_config`` payload (a JSON object string)."""
    if not auth_config:
        return {}
    if isinstance(auth_config, dict):
        return auth_config
    try:
        cfg = json.loads(auth_config)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid auth_config JSON: {exc}") from exc
    if not isinstance(cfg, dict):
        raise ValidationError("auth_config must be a JSON object.")
    return cfg


def build_auth_headers(auth_type: str, auth_config: str | dict[str, Any] | None) -> dict[str, str]:
    """HTTP headers that authenticate a request against a managed server.

    ``bearer`` uses ``token``; ``basic`` uses ``username``/``password``;
    ``api_key`` sends ``{key}: {value}``, or ``X-API-Key`` when only the
    form-style ``api_key`` field is present.
    """
    if auth_type in ("", "none"):
        return {}
    cfg = load_auth_config(auth_config)
    if auth_type == "bearer":
        return {"Authorization": f"Bearer {cfg.get('token', '')}"}
    if auth_type == "basic":
        raw = f"{cfg.get('username', '')}:{cfg.get('password', '')}".encode()
        return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}
    if auth_type == "api_key":
        if cfg.get("key"):
            return {str(cfg["key"]): str(cfg.get("value", ""))}
        return {"X-API-Key": str(cfg.get("api_key", ""))}
    raise ValidationError(f"Unknown auth type '{auth_type}'")


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <token>`` on the MCP HTTP endpoint.

    ``/health`` stays open so container health checks work without a token.
    """

    def __init__(self, app, token: str) -> None:
        super().__init__(app)
        self.token = token

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNAUTHENTICATED_PATHS:
            return await call_next(request)

        auth = request.headers.get("authorization", "")
        supplied = auth[7:] if auth.startswith("Bearer ") else ""
        if not supplied or not hmac.compare_digest(supplied, self.token):
            return JSONResponse(
                {"error": "Invalid or missing bearer token"},
                status_code=401,
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)
