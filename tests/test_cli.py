from __future__ import annotations

from pathlib import Path

import pytest

from loradb.cli import main
from loradb.core.grammar import TableName
from loradb.core.records import Record
from loradb.core.schema import Link, to_record
from loradb.db import Database
from loradb.store.config import StoreSettings
from loradb.store.parquet import ParquetStore

from conftest import T0, rxframe, txframe


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as info:
        main(argv)
    return info.value.code


@pytest.fixture
def root(tmp_path: Path, monkeypatch) -> str:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LORADB_ROOT_DIR", raising=False)
    return str(tmp_path / "db")


def test_ensure_then_trim(root: str, capsys) -> None:
    assert _run(["ensure", "--root", root]) == 0
    assert "Tables ready" in capsys.readouterr().out

    db = Database.open(StoreSettings(root_dir=root))
    assert db.store.tables() == sorted(t.value for t in TableName)

    db.put(TableName.LINKS, Link(devaddr="0011AABB"))
    assert _run(["trim", "--root", root, "--log-level", "DEBUG"]) == 0
    assert "Trimmed 1 devices: 0 rxframes expired, 0 failed" in capsys.readouterr().out


def test_rxframes_and_purge(root: str, capsys) -> None:
    assert _run(["ensure", "--root", root]) == 0
    db = Database.open(StoreSettings(root_dir=root))
    for frid in (1, 2, 3):
        db.put(TableName.RXFRAMES, rxframe(frid, "0011AABB", T0))
    db.put(TableName.TXFRAMES, txframe("0001", "0011AABB"))
    capsys.readouterr()

    assert _run(["rxframes", "0011aabb", "--root", root, "--n", "2"]) == 0
    out = capsys.readouterr().out
    assert "frid" in out
    assert "shape: (2, 7)" in out

    assert _run(["purge-txframes", "0011AABB", "--root", root]) == 0
    assert "Purged 1 txframes" in capsys.readouterr().out


def test_errors_exit_non_zero(root: str, capsys) -> None:
    # Tables were never created
    assert _run(["rxframes", "0011AABB", "--root", root]) == 1
    assert "[ERROR]" in capsys.readouterr().err

    assert _run(["frobnicate"]) == 2


def test_invalid_stored_row_exits_non_zero(root: str, capsys) -> None:
    assert _run(["ensure", "--root", root]) == 0
    store = ParquetStore(StoreSettings(root_dir=root))
    good = to_record(rxframe(1, "0011AABB", T0), "rxframe")
    values = list(good.values)
    values[1] = "not-a-mac"
    store.write("rxframes", Record("rxframe", tuple(values)))
    capsys.readouterr()

    assert _run(["rxframes", "0011AABB", "--root", root]) == 1
    assert "[ERROR]" in capsys.readouterr().err
