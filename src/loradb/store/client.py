"""
Store client interface consumed by the maintenance layer.

loradb.db never reaches for a global store handle: every reconciler and
retention pass takes a StoreClient argument. Any object with these methods can
be injected; ParquetStore (loradb.store.parquet) is the bundled implementation.

Operation contract
- Every call is atomic on its own and touches a single table.
- Table arguments accept a TableName or its lower_snake value.
- ``transform_table`` applies the function to every record and commits the
  rewritten records together with the new field order, or raises and commits
  nothing.
- ``delete_object`` removes a record only if a stored record is equal to it
  (same tag and values); a record rewritten since it was read survives.
- ``index_read`` requires an index on the field.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from loradb.core.grammar import TableName
from loradb.core.records import Record
from loradb.core.tables import TableDefinition

__all__ = [
    "LiveSchema",
    "StoreClient",
    "TableRef",
    "table_value",
]

TableRef = TableName | str


def table_value(table: TableRef) -> str:
    return table.value if isinstance(table, TableName) else str(table)


@dataclass(frozen=True, slots=True)
class LiveSchema:
    """
    Field order and index positions of a table as the store currently holds it.

    Attributes:
        attributes (tuple[str, ...]): Current field order.
        index (tuple[int, ...]): Sorted tagged-tuple positions carrying an index.
    """

    attributes: tuple[str, ...]
    index: tuple[int, ...]


class StoreClient(Protocol):
    """Primitive operations the reconcilers and retention passes rely on."""

    def has_schema(self) -> bool: ...

    def create_schema(self) -> None: ...

    def tables(self) -> list[str]: ...

    def create_table(self, definition: TableDefinition) -> None: ...

    def wait_for_tables(self, tables: Iterable[TableRef], timeout_s: float) -> None: ...

    def table_info(self, table: TableRef) -> LiveSchema: ...

    def add_table_index(self, table: TableRef, field: str) -> None: ...

    def del_table_index(self, table: TableRef, field: str) -> None: ...

    def transform_table(
        self,
        table: TableRef,
        fn: Callable[[Record], Record],
        new_fields: Sequence[str],
    ) -> None: ...

    def write(self, table: TableRef, record: Record) -> None: ...

    def read(self, table: TableRef, key: Any) -> list[Record]: ...

    def index_read(self, table: TableRef, value: Any, field: str) -> list[Record]: ...

    def all_keys(self, table: TableRef) -> list[Any]: ...

    def match_object(self, table: TableRef, pattern: Mapping[str, Any]) -> list[Record]: ...

    def delete_object(self, table: TableRef, record: Record) -> None: ...

    def delete(self, table: TableRef, key: Any) -> None: ...
