"""Official channel: vendor ProGuard names merged onto intermediate names."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from mapforge.archive.reader import read_mapping_archive
from mapforge.archive.writer import write_mapping_archive
from mapforge.cache.hash_store import HashStore, resource_lock, write_checksum_sidecar
from mapforge.config.models import Settings
from mapforge.mappings.loader import load_mapping_table, write_tsrg
from mapforge.mappings.models import MappingSet
from mapforge.merge.engine import MergeRules, merge_official
from mapforge.providers.artifacts import ArtifactLocator
from mapforge.providers.mcp_config import read_mcp_config_mappings
from mapforge.utils.errors import MissingUpstreamArtifactError, UnresolvedMappingError
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.providers")

OFFICIAL_CHANNEL = "official"

# Matches a build timestamp suffix such as ``1.16.5-20210101.010101``.
_BUILD_TIMESTAMP_RE = re.compile(r"^\d{8}\.\d{6}$")


def strip_build_timestamp(version: str) -> str:
    """Return the game version part of a version that may carry a build timestamp."""

    head, sep, tail = version.rpartition("-")
    if sep and _BUILD_TIMESTAMP_RE.match(tail):
        return head
    return version


def mapping_resource(version: str) -> str:
    return f"net/minecraft/mapping/{version}/mapping-{version}-mapping.zip"


def renames_resource(version: str) -> str:
    return f"de/oceanlabs/mcp/mcp_config/{version}/mcp_config-{version}-obf_to_srg.tsrg"


class OfficialMappingSource:
    """Resolve official names through the client/server merge, cached by inputs."""

    name = "official"

    def __init__(self, locator: ArtifactLocator, settings: Settings) -> None:
        self._locator = locator
        self._settings = settings
        self._rules = MergeRules(
            field_prefix=settings.field_prefix,
            method_prefix=settings.method_prefix,
        )

    @property
    def cache_root(self) -> Path:
        return self._settings.cache_root

    def supported_channels(self) -> frozenset[str]:
        return frozenset({OFFICIAL_CHANNEL})

    def output_path(self, version: str) -> Path:
        return self.cache_root / mapping_resource(version)

    def resolve(self, channel: str, version: str) -> MappingSet:
        if channel not in self.supported_channels():
            raise UnresolvedMappingError(
                f"Source '{self.name}' does not serve channel '{channel}'", channel=channel
            )

        game_version = strip_build_timestamp(version)
        client_pg = _require(
            self._locator.client_mappings(game_version),
            f"client ProGuard mappings {game_version}",
            version,
        )
        server_pg = _require(
            self._locator.server_mappings(game_version),
            f"server ProGuard mappings {game_version}",
            version,
        )
        mcp = _require(self._locator.mcp_config(version), f"MCPConfig archive {version}", version)
        tsrg = self._derive_renames(version, mcp)

        resource = mapping_resource(version)
        output = self.cache_root / resource
        with resource_lock(self.cache_root, resource):
            store = (
                self._common_hash(resource, mcp)
                .track("pg_client", client_pg)
                .track("pg_server", server_pg)
                .track("tsrg", tsrg)
            )

            if store.is_valid() and output.is_file():
                log_event(
                    logger, logging.INFO, "official.cache_hit", version=version, path=str(output)
                )
                return read_mapping_archive(output, channel=channel, version=version)

            log_event(logger, logging.INFO, "official.merge_started", version=version)
            # ProGuard tables map original -> obfuscated; the TSRG maps obfuscated -> intermediate.
            merged = merge_official(
                load_mapping_table(client_pg),
                load_mapping_table(server_pg),
                load_mapping_table(tsrg),
                self._rules,
            )
            mapping_set = MappingSet(
                channel=channel,
                version=version,
                fields=tuple(merged.fields),
                methods=tuple(merged.methods),
            )

            write_mapping_archive(output, mapping_set)
            write_checksum_sidecar(output)
            store.commit()
            return mapping_set

    def _derive_renames(self, version: str, mcp: Path) -> Path:
        """Extract the obfuscated -> intermediate table from MCPConfig as TSRG."""

        resource = renames_resource(version)
        target = self.cache_root / resource
        with resource_lock(self.cache_root, resource):
            store = self._common_hash(resource, mcp)
            if store.is_valid() and target.is_file():
                return target

            table = load_mapping_table(read_mcp_config_mappings(mcp), name=f"{mcp}!mappings")
            write_tsrg(table, target)
            write_checksum_sidecar(target)
            store.commit()
            log_event(
                logger, logging.INFO, "official.renames_derived", version=version, path=str(target)
            )
        return target

    def _common_hash(self, resource: str, mcp: Path) -> HashStore:
        return (
            HashStore(self.cache_root, resource)
            .track("mcp", mcp)
            .track("codever", self._settings.code_version)
            .track("rules", f"{self._rules.field_prefix}|{self._rules.method_prefix}")
        )


def _require(path: Path | None, description: str, version: str) -> Path:
    if path is None:
        raise MissingUpstreamArtifactError(
            f"Could not create {version} official mappings due to missing {description}",
            artifact=description,
        )
    return path
