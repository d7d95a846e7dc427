"""Local lookup of upstream artifacts needed by mapping sources."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from mapforge.config.models import Settings


class ArtifactLocator(Protocol):
    """Locate already-available upstream files; ``None`` when unavailable."""

    def client_mappings(self, game_version: str) -> Path | None: ...

    def server_mappings(self, game_version: str) -> Path | None: ...

    def mcp_config(self, version: str) -> Path | None: ...


class LocalArtifactLocator:
    """Find artifacts in one directory using file name templates."""

    def __init__(
        self,
        root: Path,
        *,
        client_mappings_name: str = "client-{version}-mappings.txt",
        server_mappings_name: str = "server-{version}-mappings.txt",
        mcp_config_name: str = "mcp_config-{version}.zip",
    ) -> None:
        self._root = root
        self._client_mappings_name = client_mappings_name
        self._server_mappings_name = server_mappings_name
        self._mcp_config_name = mcp_config_name

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalArtifactLocator:
        return cls(
            settings.artifacts_dir,
            client_mappings_name=settings.client_mappings_name,
            server_mappings_name=settings.server_mappings_name,
            mcp_config_name=settings.mcp_config_name,
        )

    def client_mappings(self, game_version: str) -> Path | None:
        return self._existing(self._client_mappings_name, game_version)

    def server_mappings(self, game_version: str) -> Path | None:
        return self._existing(self._server_mappings_name, game_version)

    def mcp_config(self, version: str) -> Path | None:
        return self._existing(self._mcp_config_name, version)

    def _existing(self, template: str, version: str) -> Path | None:
        candidate = self._root / template.format(version=version)
        return candidate if candidate.is_file() else None
