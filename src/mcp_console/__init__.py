"""MCP Console: manage registered MCP servers and their tools via MCP tools."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("mcp-console")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for editable installs / development
