from __future__ import annotations

from datetime import timedelta

from conftest import T0, rxframe, txframe

from loradb.core.grammar import TableName
from loradb.core.schema import Link, RxFrame
from loradb.db import get_rxframes, purge_txframes


def test_reset_hides_older_frames(db, store) -> None:
    db.put(TableName.LINKS, Link(devaddr="0011AABB", last_reset=T0))
    for frid, offset in [(1, -5), (2, -1), (3, 1), (4, 2)]:
        db.put(TableName.RXFRAMES, rxframe(frid, "0011AABB", T0 + timedelta(seconds=offset)))

    frames = db.get_rxframes("0011AABB")

    assert all(isinstance(f, RxFrame) for f in frames)
    assert [(f.frid, f.datetime) for f in frames] == [
        (3, T0 + timedelta(seconds=1)),
        (4, T0 + timedelta(seconds=2)),
    ]


def test_window_without_reset(db, store, add_frames) -> None:
    add_frames("0011AABB", [1, 2, 3, 4])
    assert [f.frid for f in get_rxframes(store, "0011aabb", 3)] == [2, 3, 4]

    # No link at all: still the plain window
    for frid in (10, 11):
        db.put(TableName.RXFRAMES, rxframe(frid, "0011CCDD", T0))
    assert [f.frid for f in get_rxframes(store, "0011CCDD")] == [10, 11]
    assert get_rxframes(store, "0011EEFF") == []


def test_reading_does_not_delete(db, store, add_frames) -> None:
    add_frames("0011AABB", [1, 2, 3])
    get_rxframes(store, "0011AABB", 1)
    assert len(get_rxframes(store, "0011AABB", 10)) == 3


def test_purge_touches_only_the_device(db, store, add_frames) -> None:
    add_frames("0011AABB", [1])
    db.put(TableName.TXFRAMES, txframe("0002", "0011AABB"))
    db.put(TableName.TXFRAMES, txframe("0001", "0011AABB"))
    db.put(TableName.TXFRAMES, txframe("0003", "0011AABC"))

    assert db.purge_txframes("0011aabb") == 2

    assert store.all_keys("txframes") == ["0003"]
    assert purge_txframes(store, "0011AABB") == 0
    assert [f.frid for f in db.get_rxframes("0011AABB")] == [1]


def test_naive_reset_is_read_as_utc(db, store) -> None:
    naive_t0 = T0.replace(tzinfo=None)
    db.put(TableName.LINKS, Link(devaddr="0011AABB", last_reset=naive_t0))
    db.put(TableName.RXFRAMES, rxframe(1, "0011AABB", T0 - timedelta(seconds=1)))
    db.put(TableName.RXFRAMES, rxframe(2, "0011AABB", T0 + timedelta(seconds=1)))
    db.put(TableName.RXFRAMES, rxframe(3, "0011AABB", naive_t0 + timedelta(seconds=2)))

    frames = db.get_rxframes("0011AABB")

    assert [f.frid for f in frames] == [2, 3]
    assert all(f.datetime.tzinfo is not None for f in frames)
