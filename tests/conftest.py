from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from loradb.core.grammar import TableName
from loradb.core.schema import Link, RxFrame, TxFrame
from loradb.db import Database
from loradb.store.config import StoreSettings
from loradb.store.parquet import ParquetStore

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)

MUTATING = frozenset(
    {
        "create_schema",
        "create_table",
        "add_table_index",
        "del_table_index",
        "transform_table",
        "write",
        "delete_object",
        "delete",
    }
)


class RecordingStore(ParquetStore):
    """ParquetStore that records the name of every mutating call."""

    def __init__(self, settings: StoreSettings) -> None:
        super().__init__(settings)
        self.calls: list[str] = []

    def mutations(self) -> list[str]:
        return [c for c in self.calls if c in MUTATING]

    def create_schema(self, *a, **kw):
        self.calls.append("create_schema")
        return super().create_schema(*a, **kw)

    def create_table(self, *a, **kw):
        self.calls.append("create_table")
        return super().create_table(*a, **kw)

    def add_table_index(self, *a, **kw):
        self.calls.append("add_table_index")
        return super().add_table_index(*a, **kw)

    def del_table_index(self, *a, **kw):
        self.calls.append("del_table_index")
        return super().del_table_index(*a, **kw)

    def transform_table(self, *a, **kw):
        self.calls.append("transform_table")
        return super().transform_table(*a, **kw)

    def write(self, *a, **kw):
        self.calls.append("write")
        return super().write(*a, **kw)

    def delete_object(self, *a, **kw):
        self.calls.append("delete_object")
        return super().delete_object(*a, **kw)

    def delete(self, *a, **kw):
        self.calls.append("delete")
        return super().delete(*a, **kw)


@pytest.fixture
def settings(tmp_path: Path) -> StoreSettings:
    return StoreSettings(
        root_dir=str(tmp_path / "db"),
        ready_timeout_s=0.5,
        ready_poll_interval_s=0.01,
    )


@pytest.fixture
def store(settings: StoreSettings) -> RecordingStore:
    return RecordingStore(settings)


@pytest.fixture
def db(store: RecordingStore, settings: StoreSettings) -> Database:
    database = Database(store, settings)
    database.ensure_tables()
    store.calls.clear()
    return database


def rxframe(frid: int, devaddr: str, when: datetime, mac: str = "B827EBFFFE000001") -> RxFrame:
    return RxFrame(frid=frid, mac=mac, devaddr=devaddr, fcnt=frid, port=1, data="00", datetime=when)


def txframe(frid: str, devaddr: str) -> TxFrame:
    return TxFrame(frid=frid, datetime=T0, devaddr=devaddr, port=2, data="CAFE")


@pytest.fixture
def add_frames(db: Database):
    """Store a link for the device and rxframes with the given frids, one second apart."""

    def _add(devaddr: str, frids: list[int], last_reset: datetime | None = None) -> None:
        db.put(TableName.LINKS, Link(devaddr=devaddr, last_reset=last_reset))
        for frid in frids:
            db.put(TableName.RXFRAMES, rxframe(frid, devaddr, T0 + timedelta(seconds=frid)))

    return _add
