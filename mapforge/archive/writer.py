"""Reproducible zip archive output for mapping sets.

Writing the same mapping set twice yields byte-identical archives: entries use
a fixed timestamp, fixed attributes, a fixed deflate level and a fixed order,
and CSV text is always fully quoted, UTF-8 and ``\\n`` terminated.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from mapforge.mappings.models import MappingEntry, MappingSet
from mapforge.utils.files import atomic_write
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.archive")

STABLE_DATE_TIME = (1980, 2, 1, 0, 0, 0)
_COMPRESS_LEVEL = 6
_UNIX_SYSTEM = 3
_FILE_MODE = 0o100644


@dataclass(frozen=True)
class SectionSpec:
    """Archive entry layout for one mapping category."""

    category: str
    entry_name: str
    header: tuple[str, ...]
    documented: bool


SECTIONS: tuple[SectionSpec, ...] = (
    SectionSpec("classes", "classes.csv", ("searge", "name", "side", "desc"), True),
    SectionSpec("methods", "methods.csv", ("searge", "name", "side", "desc"), True),
    SectionSpec("fields", "fields.csv", ("searge", "name", "side", "desc"), True),
    SectionSpec("parameters", "params.csv", ("param", "name", "side"), False),
)


def render_section(spec: SectionSpec, entries: Sequence[MappingEntry]) -> bytes:
    """Render one category as a quoted CSV block."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(spec.header)
    for entry in entries:
        row = [entry.intermediate, entry.mapped, str(int(entry.side))]
        if spec.documented:
            row.append(entry.documentation or "")
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


def stable_entry(name: str) -> zipfile.ZipInfo:
    """Build a zip entry header that does not depend on the clock or platform."""

    info = zipfile.ZipInfo(name, date_time=STABLE_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.create_system = _UNIX_SYSTEM
    info.external_attr = _FILE_MODE << 16
    return info


def write_archive_stream(handle: BinaryIO, mapping_set: MappingSet) -> list[str]:
    """Write the archive to an open binary stream and return the entry names."""

    written: list[str] = []
    with zipfile.ZipFile(handle, mode="w") as archive:
        for spec in SECTIONS:
            entries: Sequence[MappingEntry] = getattr(mapping_set, spec.category)
            if not entries:
                continue
            archive.writestr(
                stable_entry(spec.entry_name),
                render_section(spec, entries),
                compresslevel=_COMPRESS_LEVEL,
            )
            written.append(spec.entry_name)
    return written


def build_mapping_archive(mapping_set: MappingSet) -> bytes:
    buffer = io.BytesIO()
    write_archive_stream(buffer, mapping_set)
    return buffer.getvalue()


def write_mapping_archive(path: Path, mapping_set: MappingSet) -> None:
    """Write ``mapping_set`` to ``path``, replacing any existing file atomically."""

    payload = build_mapping_archive(mapping_set)
    atomic_write(path, lambda handle: handle.write(payload))
    log_event(
        logger,
        logging.INFO,
        "archive.written",
        path=str(path),
        channel=mapping_set.channel,
        version=mapping_set.version,
        bytes=len(payload),
    )
