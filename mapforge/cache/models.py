"""Data models for persisted input fingerprints."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FingerprintRecord:
    """On-disk JSON structure for one tracked resource."""

    version: int = 1
    entries: dict[str, str] = field(default_factory=dict)
