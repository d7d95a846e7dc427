"""Explicit mapping source registry built at process start."""

from __future__ import annotations

import logging

from mapforge.config.models import Settings
from mapforge.mappings.models import MappingSet
from mapforge.providers.artifacts import ArtifactLocator, LocalArtifactLocator
from mapforge.providers.base import MappingSource
from mapforge.providers.official import OfficialMappingSource
from mapforge.utils.errors import UnresolvedMappingError
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.providers")


class MappingSourceRegistry:
    """Channel -> source lookup in registration order."""

    def __init__(self, sources: list[MappingSource] | None = None) -> None:
        self._sources: list[MappingSource] = []
        for source in sources or []:
            self.register(source)

    def register(self, source: MappingSource) -> None:
        """Add a source; a channel claimed by two sources is a configuration error."""

        claimed = set(self.channels())
        overlap = sorted(claimed & set(source.supported_channels()))
        if overlap:
            raise ValueError(
                f"Mapping source '{source.name}' claims already registered channels: "
                f"{', '.join(overlap)}"
            )
        self._sources.append(source)

    def find(self, channel: str) -> MappingSource | None:
        for source in self._sources:
            if channel in source.supported_channels():
                return source
        return None

    def channels(self) -> list[str]:
        """Return claimed channels in stable order."""

        return sorted(
            {channel for source in self._sources for channel in source.supported_channels()}
        )

    def resolve(self, channel: str, version: str) -> MappingSet:
        source = self.find(channel)
        if source is None:
            raise UnresolvedMappingError(
                f"No mapping source registered for channel '{channel}'", channel=channel
            )
        log_event(
            logger,
            logging.INFO,
            "providers.resolve",
            source=source.name,
            channel=channel,
            version=version,
        )
        return source.resolve(channel, version)


def build_default_registry(
    settings: Settings, locator: ArtifactLocator | None = None
) -> MappingSourceRegistry:
    """Build the registry with the bundled official source."""

    active_locator = locator or LocalArtifactLocator.from_settings(settings)
    return MappingSourceRegistry([OfficialMappingSource(active_locator, settings)])


def parse_mapping_string(mappings: str) -> tuple[str, str]:
    """Split ``{channel}_{version}`` at the last underscore."""

    channel, sep, version = mappings.rpartition("_")
    if not sep or not channel or not version:
        raise ValueError(
            f"Invalid mapping string '{mappings}', must be {{channel}}_{{version}}"
        )
    return channel, version
