"""Official-name merge of client and server obfuscation tables.

Each variant's ProGuard table (original -> obfuscated) is translated through the
intermediate table (obfuscated -> intermediate) so both variants share one key
space. The two sides are then merged per category into joined, client-only and
server-only entries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from mapforge.mappings.models import MappingEntry, Side
from mapforge.mappings.tables import MappingTable
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.merge")

_SIDE_ORDER = {Side.JOINED: 0, Side.CLIENT: 1, Side.SERVER: 2}


@dataclass(frozen=True)
class MergeRules:
    """Prefixes marking tool-generated intermediate names eligible for renaming."""

    field_prefix: str = "field_"
    method_prefix: str = "func_"


@dataclass(frozen=True)
class SideNames:
    """Intermediate -> original names collected from one variant."""

    fields: dict[str, str] = field(default_factory=dict)
    methods: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MergeResult:
    """Merged entries per category, sorted by intermediate name."""

    fields: list[MappingEntry] = field(default_factory=list)
    methods: list[MappingEntry] = field(default_factory=list)


def collect_side_names(
    variant: MappingTable, intermediate: MappingTable, rules: MergeRules
) -> SideNames:
    """Translate one variant's members into intermediate-keyed original names."""

    fields: dict[str, str] = {}
    methods: dict[str, str] = {}
    skipped_classes = 0

    for cls in variant.iter_classes():
        obf = intermediate.get_class(cls.right)
        if obf is None:
            # The class did not survive obfuscation, so it has no intermediate name.
            skipped_classes += 1
            continue

        for fld in cls.fields.values():
            name = obf.remap_field(fld.right)
            if name is not None and name.startswith(rules.field_prefix):
                fields[name] = fld.left

        for mtd in cls.methods.values():
            mapped_descriptor = variant.remap_descriptor(mtd.descriptor or "")
            name = obf.remap_method(mtd.right, mapped_descriptor)
            if name is not None and name.startswith(rules.method_prefix):
                methods[name] = mtd.left

    log_event(
        logger,
        logging.DEBUG,
        "merge.side_collected",
        fields=len(fields),
        methods=len(methods),
        skipped_classes=skipped_classes,
    )
    return SideNames(fields=dict(sorted(fields.items())), methods=dict(sorted(methods.items())))


def merge_sides(client: Mapping[str, str], server: Mapping[str, str]) -> list[MappingEntry]:
    """Merge two intermediate -> name maps into sided entries.

    A name present on both sides with the same original name is joined; any
    other client name is client-only and any unconsumed server name is
    server-only.
    """

    remaining = dict(server)
    entries: list[MappingEntry] = []

    for name in sorted(client):
        mapped = client[name]
        if remaining.get(name) == mapped:
            entries.append(MappingEntry(intermediate=name, mapped=mapped, side=Side.JOINED))
            del remaining[name]
        else:
            entries.append(MappingEntry(intermediate=name, mapped=mapped, side=Side.CLIENT))

    for name in sorted(remaining):
        entries.append(MappingEntry(intermediate=name, mapped=remaining[name], side=Side.SERVER))

    return sorted(entries, key=lambda entry: (entry.intermediate, _SIDE_ORDER[entry.side]))


def merge_official(
    client: MappingTable,
    server: MappingTable,
    intermediate: MappingTable,
    rules: MergeRules | None = None,
) -> MergeResult:
    """Merge client and server tables into intermediate-keyed fields and methods."""

    active_rules = rules or MergeRules()
    client_names = collect_side_names(client, intermediate, active_rules)
    server_names = collect_side_names(server, intermediate, active_rules)

    result = MergeResult(
        fields=merge_sides(client_names.fields, server_names.fields),
        methods=merge_sides(client_names.methods, server_names.methods),
    )
    log_event(
        logger,
        logging.INFO,
        "merge.completed",
        fields=len(result.fields),
        methods=len(result.methods),
    )
    return result

