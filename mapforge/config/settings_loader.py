"""Settings loading utilities."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from mapforge.config.models import Settings

_PATH_KEYS = ("cache_root", "artifacts_dir")


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from YAML.

    Relative directories are resolved against the settings file's directory,
    except for the bundled defaults, which resolve against the working directory.
    """

    settings_path = path or Path(__file__).with_name("settings.yaml")

    try:
        raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Settings file not found: {settings_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in settings file: {settings_path}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Settings file must contain a mapping: {settings_path}")

    base_dir = settings_path.parent if path is not None else Path.cwd()
    normalized = _resolve_paths(raw, base_dir)

    try:
        return Settings.model_validate(normalized)
    except ValidationError as exc:
        raise ValueError(f"Invalid settings schema: {settings_path}") from exc


def _resolve_paths(raw: dict[object, object], base_dir: Path) -> dict[object, object]:
    normalized = dict(raw)
    for key in _PATH_KEYS:
        value = normalized.get(key)
        if not isinstance(value, str):
            continue
        candidate = Path(value).expanduser()
        normalized[key] = candidate if candidate.is_absolute() else base_dir / candidate
    return normalized
