from __future__ import annotations

from pathlib import Path

import pytest

from mapforge.config.models import Settings
from samples import CLIENT_PG, JOINED_TSRG, SERVER_PG, OfficialArtifacts, write_mcp_config


@pytest.fixture
def official_artifacts(tmp_path: Path) -> OfficialArtifacts:
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()
    client = artifacts_dir / "client-1.16.5-mappings.txt"
    server = artifacts_dir / "server-1.16.5-mappings.txt"
    mcp_config = artifacts_dir / "mcp_config-1.16.5.zip"
    client.write_text(CLIENT_PG, encoding="utf-8")
    server.write_text(SERVER_PG, encoding="utf-8")
    write_mcp_config(mcp_config, JOINED_TSRG)

    settings = Settings(cache_root=tmp_path / "cache", artifacts_dir=artifacts_dir)
    return OfficialArtifacts(settings=settings, client=client, server=server, mcp_config=mcp_config)
