"""Entry point for `python -m mcp_console` and the `mcp-console` console script."""

import logging
import os
import sys

_LOGGER = logging.getLogger(__name__)


def setup_logging() -> None:
    """Log to stderr so stdio transport output stays clean."""
    logging.basicConfig(
        level=os.getenv("PYTHONLOGLEVEL", "INFO"),
        format="[%(asctime)s] %(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main() -> None:
    setup_logging()
    transport = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower()

    if transport == "streamable-http":
        _run_http()
    else:
        from mcp_console.server import mcp

        mcp.run()


def _run_http() -> None:
    """Start the Streamable HTTP server with optional bearer-token auth."""
    from mcp_console.server import mcp

    host = os.environ.get("MCP_HOST", "0.0.0.0")
    port = int(os.environ.get("MCP_PORT", "8000"))
    token = os.environ.get("MCP_AUTH_TOKEN", "").strip()

    if token:
        # Run via uvicorn directly so the session-manager lifespan stays intact.
        import uvicorn

        from mcp_console.auth import BearerAuthMiddleware

        app = mcp.streamable_http_app()
        app.add_middleware(BearerAuthMiddleware, token=token)

        _LOGGER.info("Bearer-token authentication enabled")
        _LOGGER.info(f"Listening on {host}:{port} (streamable-http)")
        uvicorn.run(app, host=host, port=port, log_level="info")
    else:
        _LOGGER.warning("MCP_AUTH_TOKEN not set, server is unauthenticated")
        mcp.settings.host = host
        mcp.settings.port = port
        mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
