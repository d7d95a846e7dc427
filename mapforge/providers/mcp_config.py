"""Read mapping data out of an MCPConfig archive."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path

from mapforge.utils.errors import MalformedInputError, MissingUpstreamArtifactError

_CONFIG_ENTRY = "config.json"


def read_mcp_config_mappings(path: Path) -> bytes:
    """Return the bytes of the mappings entry named by ``config.json``'s ``data.mappings``."""

    source = str(path)
    try:
        with zipfile.ZipFile(path) as archive:
            config = _read_config(archive, source)
            entry = _mappings_entry(config, source)
            try:
                return archive.read(entry)
            except KeyError as exc:
                raise MalformedInputError(
                    f"MCPConfig mappings entry '{entry}' missing from {path}", source=source
                ) from exc
    except FileNotFoundError as exc:
        raise MissingUpstreamArtifactError(
            f"MCPConfig archive not found: {path}", artifact=source
        ) from exc
    except zipfile.BadZipFile as exc:
        raise MalformedInputError(f"Invalid MCPConfig archive: {path}", source=source) from exc


def _read_config(archive: zipfile.ZipFile, source: str) -> dict[str, object]:
    try:
        raw = json.loads(archive.read(_CONFIG_ENTRY).decode("utf-8"))
    except KeyError as exc:
        raise MalformedInputError(f"{_CONFIG_ENTRY} missing from {source}", source=source) from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedInputError(f"Invalid {_CONFIG_ENTRY} in {source}", source=source) from exc

    if not isinstance(raw, dict):
        raise MalformedInputError(
            f"{_CONFIG_ENTRY} must contain an object: {source}", source=source
        )
    return raw


def _mappings_entry(config: dict[str, object], source: str) -> str:
    data = config.get("data")
    entry = data.get("mappings") if isinstance(data, dict) else None
    if not isinstance(entry, str) or not entry:
        raise MalformedInputError(
            f"{_CONFIG_ENTRY} has no data.mappings in {source}", source=source
        )
    return entry
