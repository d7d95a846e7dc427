from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from mapforge.archive.reader import read_mapping_archive
from mapforge.archive.writer import STABLE_DATE_TIME, build_mapping_archive, write_mapping_archive
from mapforge.mappings.models import MappingEntry, MappingSet, Side
from mapforge.utils.errors import MalformedInputError, MappingIOError


def _mapping_set(**overrides: object) -> MappingSet:
    values: dict[str, object] = {
        "channel": "official",
        "version": "1.16.5",
        "classes": (MappingEntry("net/minecraft/Foo", "Foo", Side.JOINED, "A \"quoted\" doc"),),
        "fields": (
            MappingEntry("field_1_a", "count", Side.JOINED),
            MappingEntry("field_2_b", "name", Side.CLIENT),
            MappingEntry("field_2_b", "title", Side.SERVER),
        ),
        "methods": (MappingEntry("func_3_c", "tick", Side.JOINED),),
        "parameters": (MappingEntry("p_3_0", "delta", Side.SERVER),),
    }
    values.update(overrides)
    return MappingSet(**values)  # type: ignore[arg-type]


def test_repeated_writes_are_byte_identical(tmp_path: Path) -> None:
    first = tmp_path / "first.zip"
    second = tmp_path / "second.zip"

    write_mapping_archive(first, _mapping_set())
    write_mapping_archive(second, _mapping_set())

    assert first.read_bytes() == second.read_bytes()


def test_entries_use_fixed_metadata_and_order(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"

    write_mapping_archive(path, _mapping_set())

    with zipfile.ZipFile(path) as archive:
        infos = archive.infolist()
    assert [info.filename for info in infos] == [
        "classes.csv",
        "methods.csv",
        "fields.csv",
        "params.csv",
    ]
    assert {info.date_time for info in infos} == {STABLE_DATE_TIME}
    assert {info.compress_type for info in infos} == {zipfile.ZIP_DEFLATED}
    assert {info.create_system for info in infos} == {3}
    assert {info.external_attr for info in infos} == {0o100644 << 16}


def test_sections_are_quoted_lf_terminated_with_integer_sides() -> None:
    with zipfile.ZipFile(_as_file(build_mapping_archive(_mapping_set()))) as archive:
        fields = archive.read("fields.csv")
        classes = archive.read("classes.csv")
        params = archive.read("params.csv")

    assert fields == (
        b'"searge","name","side","desc"\n'
        b'"field_1_a","count","0",""\n'
        b'"field_2_b","name","2",""\n'
        b'"field_2_b","title","1",""\n'
    )
    assert classes.endswith(b'"net/minecraft/Foo","Foo","0","A ""quoted"" doc"\n')
    assert params == b'"param","name","side"\n"p_3_0","delta","1"\n'


def test_empty_categories_are_omitted() -> None:
    mapping_set = _mapping_set(classes=(), parameters=())

    with zipfile.ZipFile(_as_file(build_mapping_archive(mapping_set))) as archive:
        names = archive.namelist()

    assert names == ["methods.csv", "fields.csv"]


def test_existing_archive_is_replaced(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"
    path.write_bytes(b"stale")

    write_mapping_archive(path, _mapping_set())

    assert zipfile.is_zipfile(path)
    assert list(tmp_path.glob("*.tmp")) == []


def test_unwritable_destination_raises_io_error(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"
    path.mkdir()
    (path / "keep").write_text("x", encoding="utf-8")

    with pytest.raises(MappingIOError) as excinfo:
        write_mapping_archive(path, _mapping_set())

    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path == path
    assert list(tmp_path.glob("*.tmp")) == []


def test_archive_reads_back_into_equal_mapping_set(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"
    original = _mapping_set()
    write_mapping_archive(path, original)

    loaded = read_mapping_archive(path, channel="official", version="1.16.5")

    assert loaded == original


def test_reading_non_zip_is_malformed(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"
    path.write_bytes(b"not a zip")

    with pytest.raises(MalformedInputError):
        read_mapping_archive(path, channel="official", version="1.0")


def test_reading_unknown_side_is_malformed(tmp_path: Path) -> None:
    path = tmp_path / "mappings.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("fields.csv", '"searge","name","side","desc"\n"field_1_a","a","7",""\n')

    with pytest.raises(MalformedInputError, match="Invalid side value '7'"):
        read_mapping_archive(path, channel="official", version="1.0")


def _as_file(data: bytes) -> io.BytesIO:
    return io.BytesIO(data)
