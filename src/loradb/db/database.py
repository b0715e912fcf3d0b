"""
Database facade binding a store client to its settings.

Examples:
    >>> from loradb.db import Database
    >>> db = Database.open(StoreSettings(root_dir="db"))  # doctest: +SKIP
    >>> db.ensure_tables()  # doctest: +SKIP
    >>> db.trim_tables().expired  # doctest: +SKIP
    0
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from loradb.core.grammar import TableName
from loradb.core.schema import RxFrame, from_record, to_record
from loradb.core.tables import get_table, row_model
from loradb.store.client import StoreClient
from loradb.store.config import StoreSettings
from loradb.store.parquet import ParquetStore

from .ensure import ensure_tables
from .frames import get_rxframes, purge_txframes
from .retention import TrimSummary, trim_tables


class Database:
    """
    Maintenance entry points over one store.

    Args:
        store (StoreClient): Injected store client.
        settings (StoreSettings): Timeouts, retention limit and admin credentials.
    """

    def __init__(self, store: StoreClient, settings: StoreSettings) -> None:
        self.store = store
        self.settings = settings

    @classmethod
    def open(cls, settings: StoreSettings | None = None) -> Database:
        """Facade over a ParquetStore rooted at ``settings.root_dir``."""
        settings = settings or StoreSettings.load()
        return cls(ParquetStore(settings), settings)

    def ensure_tables(self) -> None:
        ensure_tables(self.store, self.settings)

    def trim_tables(self) -> TrimSummary:
        return trim_tables(self.store, self.settings.retention_limit)

    def get_rxframes(self, devaddr: str) -> list[RxFrame]:
        return get_rxframes(self.store, devaddr, self.settings.retention_limit)

    def purge_txframes(self, devaddr: str) -> int:
        return purge_txframes(self.store, devaddr)

    # Row access for upstream writers.

    def put(self, table: TableName, row: BaseModel) -> None:
        """Store a row model in its table, laid out in the live field order."""
        definition = get_table(table)
        attrs = self.store.table_info(table.value).attributes
        self.store.write(table.value, to_record(row, definition.record_type.value, attrs))

    def get(self, table: TableName, key: Any) -> BaseModel | None:
        """Row with ``key`` parsed into the table's row model, or None."""
        records = self.store.read(table.value, key)
        if not records:
            return None
        attrs = self.store.table_info(table.value).attributes
        return from_record(row_model(table), records[0], attrs)
