"""Read mapping archives back into mapping sets."""

from __future__ import annotations

import csv
import io
import zipfile
from pathlib import Path

from mapforge.archive.writer import SECTIONS, SectionSpec
from mapforge.mappings.models import MappingEntry, MappingSet, Side
from mapforge.utils.errors import MalformedInputError, MappingIOError


def read_mapping_archive(path: Path, *, channel: str, version: str) -> MappingSet:
    """Load an archive written by ``write_mapping_archive``.

    Missing sections are read as empty categories.
    """

    try:
        with zipfile.ZipFile(path) as archive:
            names = set(archive.namelist())
            sections = {
                spec.category: _read_section(spec, archive.read(spec.entry_name), path)
                for spec in SECTIONS
                if spec.entry_name in names
            }
    except zipfile.BadZipFile as exc:
        raise MalformedInputError(f"Invalid mapping archive: {path}", source=str(path)) from exc
    except OSError as exc:
        raise MappingIOError(f"Could not read mapping archive: {path}", path=path) from exc

    try:
        return MappingSet(channel=channel, version=version, **sections)
    except ValueError as exc:
        raise MalformedInputError(f"{exc} in {path}", source=str(path)) from exc


def _read_section(spec: SectionSpec, data: bytes, path: Path) -> tuple[MappingEntry, ...]:
    source = f"{path}!{spec.entry_name}"
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Section is not UTF-8: {source}", source=source) from exc

    rows = list(csv.reader(io.StringIO(text, newline="")))
    if not rows or tuple(rows[0]) != spec.header:
        raise MalformedInputError(
            f"Unexpected section header: {source}", source=source, line_number=1
        )

    entries: list[MappingEntry] = []
    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) != len(spec.header):
            raise MalformedInputError(
                f"Unexpected column count in {source}:{line_number}",
                source=source,
                line_number=line_number,
            )
        try:
            side = Side(int(row[2]))
        except ValueError as exc:
            raise MalformedInputError(
                f"Invalid side value '{row[2]}' in {source}:{line_number}",
                source=source,
                line_number=line_number,
            ) from exc
        documentation = (row[3] or None) if spec.documented else None
        entries.append(
            MappingEntry(intermediate=row[0], mapped=row[1], side=side, documentation=documentation)
        )
    return tuple(entries)
