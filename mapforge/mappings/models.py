"""Data models for merged name mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class Side(IntEnum):
    """Build variant(s) a mapped symbol applies to, with its archive code."""

    JOINED = 0
    SERVER = 1
    CLIENT = 2


@dataclass(frozen=True)
class MappingEntry:
    """One intermediate name mapped to a human-readable name."""

    intermediate: str
    mapped: str
    side: Side = Side.JOINED
    documentation: str | None = None


@dataclass(frozen=True)
class MappingSet:
    """Resolved mappings for one channel and version."""

    channel: str
    version: str
    classes: tuple[MappingEntry, ...] = field(default_factory=tuple)
    fields: tuple[MappingEntry, ...] = field(default_factory=tuple)
    methods: tuple[MappingEntry, ...] = field(default_factory=tuple)
    parameters: tuple[MappingEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for category in ("classes", "fields", "methods", "parameters"):
            entries = tuple(getattr(self, category))
            object.__setattr__(self, category, entries)
            _ensure_unique(category, entries)

    def is_empty(self) -> bool:
        return not (self.classes or self.fields or self.methods or self.parameters)


def _ensure_unique(category: str, entries: tuple[MappingEntry, ...]) -> None:
    # A name split by side may appear once per side; a joined name appears once.
    seen: dict[str, set[Side]] = {}
    for entry in entries:
        sides = seen.setdefault(entry.intermediate, set())
        if entry.side in sides or Side.JOINED in sides or (sides and entry.side == Side.JOINED):
            raise ValueError(f"Duplicate {category} entry for {entry.intermediate}")
        sides.add(entry.side)
