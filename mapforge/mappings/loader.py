"""Loading and writing of line-oriented obfuscation mapping files.

Supported inputs:
- ProGuard mapping files (``a.b.Name -> x:`` class headers)
- TSRG v1 (``left right`` class lines, tab-indented members)
- TSRG v2 (``tsrg2 <namespaces...>`` header; first two namespaces are used)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from mapforge.mappings.tables import ClassMapping, MappingTable, MemberMapping
from mapforge.utils.errors import MalformedInputError, MissingUpstreamArtifactError
from mapforge.utils.files import atomic_write
from mapforge.utils.log import log_event

logger = logging.getLogger("mapforge.mappings")

_PG_CLASS_RE = re.compile(r"^(?P<name>[^ ]+) -> (?P<obf>[^ ]+):$")
_PG_FIELD_RE = re.compile(r"^(?P<type>[^ (]+) (?P<name>[^ (]+) -> (?P<obf>[^ ]+)$")
_PG_METHOD_RE = re.compile(
    r"^(?:\d+:\d+:)?(?P<ret>[^ ]+) (?P<name>[^ (]+)\((?P<args>[^)]*)\)"
    r"(?::\d+(?::\d+)?)? -> (?P<obf>[^ ]+)$"
)

_PRIMITIVES = {
    "void": "V",
    "boolean": "Z",
    "byte": "B",
    "char": "C",
    "short": "S",
    "int": "I",
    "long": "J",
    "float": "F",
    "double": "D",
}

_TSRG_HEADER = "tsrg2"
_TSRG_HEADER_RE = re.compile(r"^tsrg\d+\b")


def load_mapping_table(source: Path | bytes, *, name: str | None = None) -> MappingTable:
    """Load a mapping file, detecting ProGuard, TSRG v1 or TSRG v2 content."""

    label = name or (str(source) if isinstance(source, Path) else "<bytes>")
    if isinstance(source, Path):
        try:
            data = source.read_bytes()
        except FileNotFoundError as exc:
            raise MissingUpstreamArtifactError(
                f"Mapping file not found: {source}", artifact=str(source)
            ) from exc
        except OSError as exc:
            raise MissingUpstreamArtifactError(
                f"Could not read mapping file: {source}", artifact=str(source)
            ) from exc
    else:
        data = source

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Mapping file is not UTF-8: {label}", source=label) from exc

    lines = text.splitlines()
    first = _first_content_line(lines)
    if first is None:
        table = MappingTable()
    elif _TSRG_HEADER_RE.match(first):
        table = _parse_tsrg2(lines, label)
    elif _PG_CLASS_RE.match(first):
        table = _parse_proguard(lines, label)
    else:
        table = _parse_tsrg(lines, label, namespaces=2, start=0)

    log_event(logger, logging.DEBUG, "mappings.loaded", source=label, classes=len(table.classes))
    return table


def write_tsrg(table: MappingTable, path: Path) -> None:
    """Write a table as TSRG v1 with stable ordering and ``\\n`` line endings."""

    lines: list[str] = []
    for cls in table.iter_classes():
        lines.append(f"{cls.left} {cls.right}")
        for key in sorted(cls.fields):
            member = cls.fields[key]
            lines.append(f"\t{member.left} {member.right}")
        for key in sorted(cls.methods):
            member = cls.methods[key]
            lines.append(f"\t{member.left} {member.descriptor} {member.right}")

    payload = ("\n".join(lines) + "\n" if lines else "").encode("utf-8")
    atomic_write(path, lambda handle: handle.write(payload))


def java_type_to_descriptor(java_type: str) -> str:
    """Convert a ProGuard Java type (``int[]``, ``a.b.C``) into a JVM descriptor."""

    dimensions = 0
    while java_type.endswith("[]"):
        java_type = java_type[:-2]
        dimensions += 1

    base = _PRIMITIVES.get(java_type)
    if base is None:
        base = f"L{java_type.replace('.', '/')};"
    return "[" * dimensions + base


def _first_content_line(lines: list[str]) -> str | None:
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return line.rstrip()
    return None


def _parse_proguard(lines: list[str], label: str) -> MappingTable:
    classes: dict[str, ClassMapping] = {}
    current: ClassMapping | None = None

    for line_number, raw in enumerate(lines, start=1):
        if not raw.strip() or raw.lstrip().startswith("#"):
            continue
        line = raw.rstrip()

        if not line[0].isspace():
            match = _PG_CLASS_RE.match(line)
            if match is None:
                raise MalformedInputError(
                    f"Invalid ProGuard class line in {label}:{line_number}",
                    source=label,
                    line_number=line_number,
                )
            left = match.group("name").replace(".", "/")
            current = ClassMapping(left=left, right=match.group("obf").replace(".", "/"))
            classes[left] = current
            continue

        if current is None:
            raise MalformedInputError(
                f"Member line before any class in {label}:{line_number}",
                source=label,
                line_number=line_number,
            )

        member = line.strip()
        method = _PG_METHOD_RE.match(member)
        if method is not None:
            # Members qualified with another class come from inlined frames.
            if "." in method.group("name"):
                continue
            args = method.group("args")
            arg_types = [arg.strip() for arg in args.split(",")] if args.strip() else []
            descriptor = (
                "("
                + "".join(java_type_to_descriptor(arg) for arg in arg_types)
                + ")"
                + java_type_to_descriptor(method.group("ret"))
            )
            key = (method.group("name"), descriptor)
            current.methods[key] = MemberMapping(
                left=method.group("name"), right=method.group("obf"), descriptor=descriptor
            )
            continue

        fld = _PG_FIELD_RE.match(member)
        if fld is None:
            raise MalformedInputError(
                f"Invalid ProGuard member line in {label}:{line_number}",
                source=label,
                line_number=line_number,
            )
        current.fields[fld.group("name")] = MemberMapping(
            left=fld.group("name"),
            right=fld.group("obf"),
            descriptor=java_type_to_descriptor(fld.group("type")),
        )

    # Descriptors stay in the left (original) namespace, as written in the file.
    return MappingTable(classes=classes)


def _parse_tsrg2(lines: list[str], label: str) -> MappingTable:
    header_index = next(
        index
        for index, line in enumerate(lines)
        if line.strip() and not line.strip().startswith("#")
    )
    header = lines[header_index].split()
    if header[0] != _TSRG_HEADER:
        raise MalformedInputError(
            f"Unsupported mapping format '{header[0]}' in {label}",
            source=label,
            line_number=header_index + 1,
        )
    namespaces = len(header) - 1
    if namespaces < 2:
        raise MalformedInputError(
            f"tsrg2 header needs at least two namespaces in {label}",
            source=label,
            line_number=header_index + 1,
        )
    return _parse_tsrg(lines, label, namespaces=namespaces, start=header_index + 1)


def _parse_tsrg(lines: list[str], label: str, *, namespaces: int, start: int) -> MappingTable:
    classes: dict[str, ClassMapping] = {}
    current: ClassMapping | None = None

    for line_number, raw in enumerate(lines[start:], start=start + 1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        if line.startswith("\t\t"):
            # Parameter and static markers carry no field/method names.
            continue

        tokens = line.split()
        if not line[0].isspace():
            if len(tokens) != namespaces:
                raise MalformedInputError(
                    f"Invalid TSRG class line in {label}:{line_number}",
                    source=label,
                    line_number=line_number,
                )
            current = ClassMapping(left=tokens[0], right=tokens[1])
            classes[tokens[0]] = current
            continue

        if current is None:
            raise MalformedInputError(
                f"Member line before any class in {label}:{line_number}",
                source=label,
                line_number=line_number,
            )

        if len(tokens) == namespaces:
            current.fields[tokens[0]] = MemberMapping(left=tokens[0], right=tokens[1])
        elif len(tokens) == namespaces + 1 and tokens[1].startswith("("):
            key = (tokens[0], tokens[1])
            current.methods[key] = MemberMapping(
                left=tokens[0], right=tokens[2], descriptor=tokens[1]
            )
        elif len(tokens) == namespaces + 1:
            current.fields[tokens[0]] = MemberMapping(
                left=tokens[0], right=tokens[2], descriptor=tokens[1]
            )
        else:
            raise MalformedInputError(
                f"Invalid TSRG member line in {label}:{line_number}",
                source=label,
                line_number=line_number,
            )

    return MappingTable(classes=classes)
