"""Mapping source interface definitions."""

from __future__ import annotations

from typing import Protocol

from mapforge.mappings.models import MappingSet


class MappingSource(Protocol):
    """Protocol for channel-specific mapping providers."""

    name: str

    def supported_channels(self) -> frozenset[str]:
        """Return the channel identifiers this source resolves."""

    def resolve(self, channel: str, version: str) -> MappingSet:
        """Produce the mapping set for one channel and version."""
