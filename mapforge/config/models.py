"""Settings model for mapping resolution."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Settings(BaseModel):
    """Resolution settings loaded from YAML."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cache_root: Path = Path(".mapforge/cache")
    artifacts_dir: Path = Path("artifacts")
    client_mappings_name: str = "client-{version}-mappings.txt"
    server_mappings_name: str = "server-{version}-mappings.txt"
    mcp_config_name: str = "mcp_config-{version}.zip"
    field_prefix: str = Field(default="field_", min_length=1)
    method_prefix: str = Field(default="func_", min_length=1)
    code_version: str = "1"

    @field_validator("client_mappings_name", "server_mappings_name", "mcp_config_name")
    @classmethod
    def _require_version_token(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("file name template must contain '{version}'")
        return value
