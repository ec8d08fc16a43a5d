"""Pydantic models: backend records, request bodies and MCP tool inputs."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

AuthType = Literal["none", "bearer", "basic", "api_key"]
ServerStatus = Literal["active", "inactive", "error"]


def parse_tags(tags: str | None) -> list[str]:
    """Split a comma-joined tag string, keeping order and dropping blanks."""
    if not tags:
        return []
    return [t.strip() for t in tags.split(",") if t.strip()]


# ---------------------------------------------------------------------------
#  Backend records
# ---------------------------------------------------------------------------


class Server(BaseModel):
    """A registered MCP server as stored by the console backend."""

    model_config = ConfigDict(extra="ignore")
    id: int
    name: str
    description: str = ""
    url: str
    auth_type: AuthType = "none"
    auth_config: str = ""
    status: ServerStatus = "inactive"
    is_enabled: bool = True
    tags: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def tag_list(self) -> list[str]:
        return parse_tags(self.tags)


class Tool(BaseModel):
    """A single capability exposed by exactly one server."""

    model_config = ConfigDict(extra="ignore")
    id: int
    server_id: int
    name: str
    description: str = ""
    category: str = ""
    parameters: Any = None
    is_enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ServerPage(BaseModel):
    model_config = ConfigDict(extra="ignore")
    servers: list[Server] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 10

    @model_validator(mode="before")
    @classmethod
    def _null_servers(cls, data: Any) -> Any:
        # The backend serialises an empty slice as null.
        if isinstance(data, dict) and data.get("servers") is None:
            data = {**data, "servers": []}
        return data


class ToolPage(BaseModel):
    model_config = ConfigDict(extra="ignore")
    tools: list[Tool] = Field(default_factory=list)
    total: int = 0

    @model_validator(mode="before")
    @classmethod
    def _null_tools(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("tools") is None:
            data = {**data, "tools": []}
        return data


class DiscoveryResult(BaseModel):
    """Outcome of asking the backend to enumerate a server's tools."""

    model_config = ConfigDict(extra="ignore")
    success: bool
    message: str = ""
    tools_count: int | None = None
    tools: list[Tool] = Field(default_factory=list)

    @model_validator(mode="after")
    def _count_from_tools(self) -> "DiscoveryResult":
        if self.tools_count is None and self.success:
            self.tools_count = len(self.tools)
        return self


class ToolFilter(BaseModel):
    """Filters applied when loading the tool collection."""

    model_config = ConfigDict(extra="forbid", frozen=True)
    server_id: int | None = None
    category: str | None = None
    search: str | None = None
    enabled: bool | None = None

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.server_id is not None:
            params["server_id"] = self.server_id
        if self.category:
            params["category"] = self.category
        if self.search:
            params["search"] = self.search
        if self.enabled is not None:
            params["enabled"] = str(self.enabled).lower()
        return params


# ---------------------------------------------------------------------------
#  Request bodies sent to the backend
# ---------------------------------------------------------------------------


class ServerCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    url: str = Field(..., min_length=1)
    auth_type: AuthType = "none"
    auth_config: str = ""
    tags: str = Field("", max_length=255)


class ServerUpdate(ServerCreate):
    is_enabled: bool | None = None


# ---------------------------------------------------------------------------
#  MCP tool inputs
# ---------------------------------------------------------------------------


class ReadParams(BaseModel):
    """Base for read-only tools, with the output-format flag."""

    model_config = ConfigDict(extra="forbid")
    instance: str | None = Field(
        None, description="Console instance name. Omit if only one is configured."
    )
    concise: bool = Field(
        True,
        description="Compact output (default). Set false for full details.",
    )


class WriteParams(BaseModel):
    """Base for mutating tools."""

    model_config = ConfigDict(extra="forbid")
    instance: str | None = Field(
        None, description="Console instance name. Omit if only one is configured."
    )


class ServerQueryInput(ReadParams):
    """Change the server list query. Omitted fields keep their current value."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    search: str | None = Field(
        None, description="Free-text search on name/description. Empty string clears it."
    )
    status: Literal["active", "inactive", "error", "any"] | None = Field(
        None, description="Status filter; 'any' clears it."
    )
    enabled: Literal["enabled", "disabled", "any"] | None = Field(
        None, description="Enabled filter; 'any' clears it."
    )
    page: int | None = Field(None, description="Page number (1-based)", ge=1)
    size: int | None = Field(None, description="Items per page", ge=1, le=100)
    sort_by: Literal["created_at", "updated_at", "name"] | None = Field(
        None,
        description="Toggle sorting on this column. Repeating the current column flips direction.",
    )


class ServerReadInput(ReadParams):
    server_id: int = Field(..., description="Server ID", ge=1)


class ServerWriteInput(WriteParams):
    server_id: int = Field(..., description="Server ID", ge=1)


class CreateServerInput(WriteParams):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    name: str = Field(..., description="Display name", min_length=1, max_length=100)
    url: str = Field(..., description="Server endpoint URL", min_length=1)
    description: str = Field("", description="Free-form description", max_length=500)
    auth_type: AuthType = Field("none", description="Authentication kind")
    auth_config: dict[str, Any] = Field(
        default_factory=dict,
        description="Auth payload: {token} for bearer, {username, password} for basic, "
        "{key, value} or {api_key} for api_key.",
    )
    tags: list[str] = Field(default_factory=list, description="Tags (e.g. ['prod', 'k8s'])")


class UpdateServerInput(CreateServerInput):
    server_id: int = Field(..., description="Server ID", ge=1)
    is_enabled: bool | None = Field(None, description="Enabled flag. Omit to keep it.")


class SetServerEnabledInput(ServerWriteInput):
    enabled: bool = Field(..., description="Desired enabled flag")


class ConnectionCheckInput(WriteParams):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    url: str = Field(..., description="Server endpoint URL", min_length=1)
    auth_type: AuthType = Field("none", description="Authentication kind")
    auth_config: dict[str, Any] = Field(default_factory=dict, description="Auth payload")


class LoadToolsInput(ReadParams):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    server_id: int | None = Field(None, description="Only tools of this server", ge=1)
    category: str | None = Field(None, description="Only tools in this category")
    search: str | None = Field(None, description="Search on tool name/description")
    enabled: bool | None = Field(None, description="Only enabled (true) or disabled (false) tools")


class ToolTreeInput(ReadParams):
    reload: bool = Field(
        False, description="Reload servers and tools from the backend before building the tree."
    )


class CategoriesInput(ReadParams):
    server_id: int | None = Field(None, description="Limit to one server", ge=1)


class SetToolEnabledInput(WriteParams):
    tool_id: int = Field(..., description="Tool ID", ge=1)
    enabled: bool = Field(..., description="Desired enabled flag")


class SetCategoryEnabledInput(WriteParams):
    server_id: int = Field(..., description="Owning server ID", ge=1)
    category: str = Field(..., description="Category name as shown in the tree")
    enabled: bool = Field(..., description="Desired enabled flag")


class SetServerToolsEnabledInput(WriteParams):
    server_id: int = Field(..., description="Server whose tools are toggled", ge=1)
    enabled: bool = Field(..., description="Desired enabled flag")


class SetToolCategoryInput(WriteParams):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)
    tool_ids: list[int] = Field(..., description="Tools to move", min_length=1)
    category: str = Field(..., description="New category", min_length=1, max_length=50)
