from __future__ import annotations

from pathlib import Path

import pytest

from mapforge.config.settings_loader import load_settings


def test_load_default_settings() -> None:
    settings = load_settings()

    assert settings.field_prefix == "field_"
    assert settings.method_prefix == "func_"
    assert settings.code_version == "1"
    assert settings.cache_root == Path.cwd() / ".mapforge/cache"


def test_relative_paths_resolve_against_settings_file(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "settings.yaml"
    path.parent.mkdir()
    path.write_text("cache_root: cache\nartifacts_dir: /opt/artifacts\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.cache_root == tmp_path / "conf" / "cache"
    assert settings.artifacts_dir == Path("/opt/artifacts")


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")

    assert load_settings(path).mcp_config_name == "mcp_config-{version}.zip"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Settings file not found"):
        load_settings(tmp_path / "absent.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("cache_root: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_settings(path)


def test_non_mapping_raises(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_settings(path)


def test_unknown_key_is_schema_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("cache_rot: cache\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid settings schema"):
        load_settings(path)


def test_file_name_template_requires_version_token(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("client_mappings_name: client.txt\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid settings schema"):
        load_settings(path)
