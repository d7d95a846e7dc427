from __future__ import annotations

from mapforge.mappings.loader import load_mapping_table
from mapforge.mappings.models import MappingEntry, Side
from mapforge.mappings.tables import MappingTable
from mapforge.merge.engine import MergeRules, collect_side_names, merge_official, merge_sides
from samples import CLIENT_PG, JOINED_TSRG, SERVER_PG


def _tables() -> tuple[MappingTable, MappingTable, MappingTable]:
    return (
        load_mapping_table(CLIENT_PG.encode("utf-8")),
        load_mapping_table(SERVER_PG.encode("utf-8")),
        load_mapping_table(JOINED_TSRG.encode("utf-8")),
    )


def test_same_name_on_both_sides_is_joined() -> None:
    entries = merge_sides({"field_1_a": "foo"}, {"field_1_a": "foo"})

    assert entries == [MappingEntry("field_1_a", "foo", Side.JOINED)]


def test_different_names_split_into_client_and_server_entries() -> None:
    entries = merge_sides({"field_1_a": "foo"}, {"field_1_a": "bar"})

    assert entries == [
        MappingEntry("field_1_a", "foo", Side.CLIENT),
        MappingEntry("field_1_a", "bar", Side.SERVER),
    ]


def test_merge_sides_does_not_mutate_inputs() -> None:
    server = {"field_1_a": "foo", "field_2_b": "bar"}

    merge_sides({"field_1_a": "foo"}, server)

    assert server == {"field_1_a": "foo", "field_2_b": "bar"}


def test_merge_sides_sorts_by_intermediate_name() -> None:
    entries = merge_sides({"field_9_z": "z", "field_1_a": "a"}, {"field_5_m": "m"})

    assert [entry.intermediate for entry in entries] == ["field_1_a", "field_5_m", "field_9_z"]


def test_official_merge_fields() -> None:
    client, server, intermediate = _tables()

    result = merge_official(client, server, intermediate)

    assert result.fields == [
        MappingEntry("field_1_a", "count", Side.JOINED),
        MappingEntry("field_2_b", "name", Side.CLIENT),
        MappingEntry("field_2_b", "title", Side.SERVER),
        MappingEntry("field_5_a", "active", Side.CLIENT),
        MappingEntry("field_6_a", "uptime", Side.SERVER),
    ]


def test_official_merge_keeps_methods_separate_from_fields() -> None:
    client, server, intermediate = _tables()

    result = merge_official(client, server, intermediate)

    assert result.methods == [
        MappingEntry("func_3_c", "tick", Side.JOINED),
        MappingEntry("func_4_d", "copy", Side.CLIENT),
    ]
    assert all(entry.intermediate.startswith("field_") for entry in result.fields)


def test_class_missing_from_intermediate_table_contributes_nothing() -> None:
    client, _, intermediate = _tables()

    names = collect_side_names(client, intermediate, MergeRules())

    assert "secret" not in names.fields.values()
    assert "hidden" not in names.methods.values()


def test_names_without_synthetic_prefix_are_never_emitted() -> None:
    client, server, intermediate = _tables()

    result = merge_official(client, server, intermediate)

    emitted = {entry.intermediate for entry in result.fields + result.methods}
    assert "handNamed" not in emitted


def test_custom_prefixes_select_other_generated_names() -> None:
    client, server, intermediate = _tables()

    result = merge_official(
        client, server, intermediate, MergeRules(field_prefix="hand", method_prefix="none_")
    )

    assert result.fields == [MappingEntry("handNamed", "handNamed", Side.JOINED)]
    assert result.methods == []


def test_every_eligible_member_appears_once_per_side() -> None:
    client, server, intermediate = _tables()

    result = merge_official(client, server, intermediate)

    for entries in (result.fields, result.methods):
        keys = [(entry.intermediate, entry.side) for entry in entries]
        assert len(keys) == len(set(keys))
        for entry in entries:
            sides = {other.side for other in entries if other.intermediate == entry.intermediate}
            allowed = ({Side.JOINED}, {Side.CLIENT}, {Side.SERVER}, {Side.CLIENT, Side.SERVER})
            assert sides in allowed


def test_empty_tables_produce_empty_result() -> None:
    result = merge_official(MappingTable(), MappingTable(), MappingTable())

    assert result.fields == []
    assert result.methods == []
