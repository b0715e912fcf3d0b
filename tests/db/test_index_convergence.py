from __future__ import annotations

import logging

import pytest

from loradb.core.errors import ReconcileError
from loradb.core.grammar import RecordType, TableName
from loradb.core.records import Record
from loradb.core.tables import TableDefinition
from loradb.db import ensure_indexes, ensure_table
from loradb.db.indexes import positions_to_add, positions_to_drop
from loradb.store.errors import StoreWriteError


def _links(fields: tuple[str, ...], index: tuple[str, ...]) -> TableDefinition:
    return TableDefinition(
        name=TableName.LINKS, fields=fields, index=index, record_type=RecordType.LINK
    )


ABC = ("devaddr", "a", "b", "c")


@pytest.mark.parametrize(
    "start, target",
    [
        pytest.param(_links(ABC, ()), _links(ABC, ("a", "c")), id="empty"),
        pytest.param(_links(ABC, ("a", "b", "c")), _links(ABC, ("b",)), id="superset"),
        pytest.param(_links(ABC, ("a",)), _links(ABC, ("c",)), id="disjoint"),
        pytest.param(_links(ABC, ("b",)), _links(("devaddr", "a", "c", "b"), ("c",)), id="swap"),
        pytest.param(
            _links(ABC, ("a", "b")), _links(("devaddr", "b", "a", "c"), ("a", "c")), id="reorder"
        ),
        pytest.param(_links(("devaddr", "a"), ("a",)), _links(("devaddr", "a", "b"), ("b",)), id="grow"),
        pytest.param(_links(ABC, ("c",)), _links(("devaddr", "a"), ("a",)), id="shrink"),
    ],
)
def test_indexes_and_fields_converge(store, settings, start, target) -> None:
    ensure_table(store, start, settings)
    store.write("links", Record("link", tuple(f"{f}-v" if f != "devaddr" else "0011AABB" for f in start.fields)))

    ensure_table(store, target, settings)

    info = store.table_info("links")
    assert info.attributes == target.fields
    assert list(info.index) == target.index_positions()

    row = store.read("links", "0011AABB")[0].as_dict(target.fields)
    for f in target.fields[1:]:
        assert row[f] == (f"{f}-v" if f in start.fields else None)
    for f in target.index:
        assert [r.key for r in store.index_read("links", row[f], f)] == ["0011AABB"]

    store.calls.clear()
    ensure_table(store, target, settings)
    assert store.mutations() == []


def test_index_update_is_logged(store, settings, caplog) -> None:
    ensure_table(store, _links(ABC, ("a",)), settings)
    with caplog.at_level(logging.INFO, logger="loradb.db"):
        ensure_table(store, _links(ABC, ("b",)), settings)
    assert "Database index update links: [3] to [4]" in caplog.text


def test_bound_checks_skip_positions_the_layout_cannot_hold() -> None:
    assert positions_to_drop([3, 5], [3], field_count=4) == [5]
    assert positions_to_drop([3, 9], [], field_count=4) == [3]
    assert positions_to_drop([1, 4], [], field_count=4) == [4]
    assert positions_to_add([3], [3, 4, 7], field_count=3) == [4]
    assert positions_to_add([], [], field_count=3) == []


def test_store_failure_during_reconcile_raises(store, settings, monkeypatch) -> None:
    ensure_table(store, _links(ABC, ("a",)), settings)

    def refuse(table, field):
        raise StoreWriteError("disk full")

    monkeypatch.setattr(store, "del_table_index", refuse)
    with pytest.raises(ReconcileError) as info:
        ensure_indexes(store, _links(ABC, ("b",)))

    assert isinstance(info.value.__cause__, StoreWriteError)
    assert store.table_info("links").index == (3,)
