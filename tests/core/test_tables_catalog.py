from __future__ import annotations

import pytest

from loradb.core.errors import CatalogError
from loradb.core.grammar import (
    RecordType,
    StorageTier,
    TableKind,
    TableName,
    is_lower_snake,
)
from loradb.core.records import index_position
from loradb.core.schema import record_fields
from loradb.core.tables import TableDefinition, get_table, list_tables, row_model


def test_catalog_contract() -> None:
    defs = list_tables()
    assert [d.name for d in defs] == list(TableName)
    for d in defs:
        for f in d.fields:
            assert is_lower_snake(f), f"field {f!r} not lower_snake for {d.name.value}"
        assert set(d.index).issubset(d.fields), f"index not subset of fields for {d.name.value}"
        assert d.key not in d.index
        assert d.tier is StorageTier.DISC_COPIES
        assert d.fields == record_fields(row_model(d.name))


def test_declared_indexes_and_kinds() -> None:
    rx = get_table(TableName.RXFRAMES)
    assert rx.index == ("mac", "devaddr")
    assert rx.index_positions() == [index_position("mac", rx.fields), index_position("devaddr", rx.fields)]
    assert rx.index_positions() == [3, 8]
    assert rx.record_type is RecordType.RXFRAME

    devices = get_table(TableName.DEVICES)
    assert devices.index == ("link",)
    assert devices.index_positions() == [len(devices.fields) + 1]

    assert get_table(TableName.TXFRAMES).kind is TableKind.ORDERED_SET
    assert get_table(TableName.LINKS).kind is TableKind.SET
    assert "last_reset" in get_table(TableName.LINKS).fields


def test_get_table_roundtrip() -> None:
    for name in TableName:
        d = get_table(name)
        assert d.name == name
        again = TableDefinition.from_options(name, d.to_options())
        assert again == d


@pytest.mark.parametrize(
    "options",
    [
        {"attributes": ["a", "b"], "record_type": "link", "type": "bag"},
        {"attributes": ["a", "b"], "record_type": "link", "index": ["c"]},
        {"attributes": ["a", "b"], "record_type": "link", "index": ["a"]},
        {"attributes": ["a", "b"], "record_type": "link", "tier": "tape"},
        {"attributes": ["a", "b"]},
        {"attributes": ["a", "a"], "record_type": "link"},
        {"attributes": ["a", "Bad"], "record_type": "link"},
    ],
)
def test_from_options_rejects(options) -> None:
    with pytest.raises(CatalogError):
        TableDefinition.from_options(TableName.LINKS, options)
