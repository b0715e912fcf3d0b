"""
Local, Parquet-backed implementation of StoreClient.

Overview
- One directory per table holding a manifest and one live Parquet part.
- Every mutation writes a complete new part (tmp → fsync → rename), then
  commits by atomically replacing the manifest that names it, then removes
  the superseded part. A crash before the manifest rename leaves the previous
  generation live; a crash after it leaves at worst an orphan part.
- Each field is a Utf8 column holding the canonical JSON of the value, plus a
  "_tag" column for the record type. Equal values encode to equal strings, so
  key reads, index reads, pattern matches and delete-by-value are plain
  equality filters.

Index semantics
- Indexes are recorded as tagged-tuple positions, like the record layout
  they describe. ``transform_table`` keeps every indexed position that still
  falls within the new field order, so after a transform an index covers
  whichever field now occupies its position. The reconcilers drop indexes
  before a transform and add them after it for exactly this reason.

Notes
- Every table call runs under an flock on <table>/.lock (exclusive for
  mutations, shared for reads), so handles in other threads or processes
  never commit over each other's generations. A re-entrant lock also
  serializes calls on one ParquetStore.
- Storage tiers and nodes are recorded in the manifest; every tier is
  persisted the same way by this implementation.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from functools import reduce
from threading import RLock
from typing import Any

import polars as pl
import pyarrow.parquet as pq

from loradb.core.constants import STORE_FORMAT_VERSION
from loradb.core.errors import SchemaError
from loradb.core.grammar import TableKind
from loradb.core.records import Record, index_position
from loradb.core.serde import json_dumps_canonical, json_loads
from loradb.core.tables import TableDefinition

from .client import LiveSchema, TableRef, table_value
from .config import StoreSettings
from .errors import (
    IndexMissingError,
    NoSuchTableError,
    StoreError,
    StoreManifestError,
    StoreTimeoutError,
    StoreWriteError,
    TableExistsError,
    TransformError,
)
from .fs import file_lock, fsync_path, listdir, makedirs, remove_if_exists, rename_atomic
from .manifest import (
    TableManifest,
    has_schema_marker,
    load_manifest,
    write_manifest,
    write_schema_marker,
)
from .paths import is_part_name, lock_path, part_paths, table_dir, tables_root

logger = logging.getLogger(__name__)

_TAG = "_tag"


def _encode(value: Any) -> str:
    return json_dumps_canonical(value)


def _same(a: Record, b: Record) -> bool:
    """Equality as stored: tuples and lists with equal items encode alike."""
    return a.tag == b.tag and _encode(list(a.values)) == _encode(list(b.values))


class ParquetStore:
    """
    StoreClient over a local directory tree.

    Args:
        settings (StoreSettings): root_dir and compression are used here;
            readiness timeouts are passed per call.

    Examples:
        >>> from loradb.store import ParquetStore, StoreSettings
        >>> store = ParquetStore(StoreSettings(root_dir="db"))  # doctest: +SKIP
        >>> store.tables()  # doctest: +SKIP
        []

    Notes:
        Construction performs no I/O.
    """

    def __init__(self, settings: StoreSettings) -> None:
        self.settings = settings
        self._lock = RLock()

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------
    @contextmanager
    def _locked(self, table: TableRef, shared: bool = False, create: bool = False) -> Iterator[str]:
        """
        Hold this handle's lock and the table's file lock for one call.

        Mutations take the file lock exclusively from the manifest load through
        the manifest rename; reads take it shared so the part they load is not
        removed under them.
        """
        tname = table_value(table)
        tdir = table_dir(self.settings, tname)
        if create:
            makedirs(tdir, exist_ok=True)
        elif not os.path.isdir(tdir):
            raise NoSuchTableError(f"no such table {tname!r}")
        with self._lock, file_lock(lock_path(self.settings, tname), shared=shared):
            yield tname

    def _manifest(self, table: TableRef) -> TableManifest:
        tname = table_value(table)
        m = load_manifest(self.settings, tname)
        if m is None:
            raise NoSuchTableError(f"no such table {tname!r}")
        return m

    def _frame(self, m: TableManifest) -> pl.DataFrame:
        schema = {_TAG: pl.Utf8, **{a: pl.Utf8 for a in m.attributes}}
        if m.part is None:
            return pl.DataFrame(schema=schema)
        path = os.path.join(table_dir(self.settings, m.table), m.part)
        try:
            df = pl.read_parquet(path)
        except (OSError, pl.exceptions.ComputeError) as exc:
            raise StoreManifestError(
                f"live part {m.part!r} of table {m.table!r} is unreadable: {exc}"
            ) from exc
        if df.columns != list(schema):
            raise StoreManifestError(
                f"part {m.part!r} columns {df.columns!r} do not match manifest {list(schema)!r}"
            )
        return df

    @staticmethod
    def _to_records(df: pl.DataFrame) -> list[Record]:
        return [Record(row[0], tuple(json_loads(v) for v in row[1:])) for row in df.iter_rows()]

    def _records(self, m: TableManifest) -> list[Record]:
        return self._to_records(self._frame(m))

    def _check_record(self, m: TableManifest, record: Record) -> None:
        if record.tag != m.record_type:
            raise SchemaError(
                f"table {m.table!r} holds {m.record_type!r} records, got {record.tag!r}"
            )
        if len(record.values) != len(m.attributes):
            raise SchemaError(
                f"{record.tag} record has {len(record.values)} values for "
                f"{len(m.attributes)} fields of table {m.table!r}"
            )

    def _commit(self, m: TableManifest, records: list[Record]) -> None:
        """Write ``records`` as a new part and commit ``m`` pointing at it."""
        if m.kind == TableKind.ORDERED_SET.value:
            records = sorted(records, key=lambda r: r.key)
        columns = [_TAG, *m.attributes]
        df = pl.DataFrame(
            [[r.tag, *(_encode(v) for v in r.values)] for r in records],
            schema={c: pl.Utf8 for c in columns},
            orient="row",
        )

        ppaths = part_paths(self.settings, m.table, uuid.uuid4().hex)
        makedirs(os.path.dirname(ppaths.final_path), exist_ok=True)
        try:
            arrow_table = df.to_arrow()
            meta = dict(arrow_table.schema.metadata or {})
            meta.update(
                {
                    b"loradb_table": m.table.encode("utf-8"),
                    b"loradb_record_type": m.record_type.encode("utf-8"),
                    b"loradb_format": str(STORE_FORMAT_VERSION).encode("utf-8"),
                }
            )
            arrow_table = arrow_table.replace_schema_metadata(meta)
            pq.write_table(arrow_table, ppaths.tmp_path, compression=self.settings.compression)
            fsync_path(ppaths.tmp_path)
            rename_atomic(ppaths.tmp_path, ppaths.final_path)
        except Exception as exc:
            remove_if_exists(ppaths.tmp_path)
            raise StoreWriteError(f"failed to write part for table {m.table!r}: {exc}") from exc

        previous = m.part
        m.part = ppaths.name
        m.rows = len(records)
        m.state = "ready"
        try:
            write_manifest(self.settings, m)
        except OSError as exc:
            remove_if_exists(ppaths.final_path)
            raise StoreWriteError(f"failed to commit manifest for table {m.table!r}: {exc}") from exc

        if previous is not None and previous != m.part:
            remove_if_exists(os.path.join(table_dir(self.settings, m.table), previous))

    def _commit_manifest(self, m: TableManifest) -> None:
        try:
            write_manifest(self.settings, m)
        except OSError as exc:
            raise StoreWriteError(f"failed to commit manifest for table {m.table!r}: {exc}") from exc

    # ---------------------------------------------------------------------
    # Schema and tables
    # ---------------------------------------------------------------------
    def has_schema(self) -> bool:
        return has_schema_marker(self.settings)

    def create_schema(self) -> None:
        """Create the root directory and schema marker for this node."""
        with self._lock:
            makedirs(tables_root(self.settings), exist_ok=True)
            write_schema_marker(self.settings)

    def tables(self) -> list[str]:
        root = tables_root(self.settings)
        return [
            name
            for name in listdir(root)
            if os.path.exists(os.path.join(root, name, "manifest.json"))
        ]

    def create_table(self, definition: TableDefinition) -> None:
        """
        Create an empty table from its definition.

        Raises:
            TableExistsError: If the table already exists.
            StoreWriteError: If the initial commit fails.
        """
        tname = definition.name.value
        with self._locked(tname, create=True):
            if load_manifest(self.settings, tname) is not None:
                raise TableExistsError(f"table {tname!r} already exists")
            m = TableManifest(
                table=tname,
                record_type=definition.record_type.value,
                kind=definition.kind.value,
                tier=definition.tier.value,
                attributes=list(definition.fields),
                index=definition.index_positions(),
                nodes=list(definition.nodes or (self.settings.node,)),
            )
            self._commit_manifest(m)
            self._commit(m, [])

    def wait_for_tables(self, tables: Iterable[TableRef], timeout_s: float) -> None:
        """
        Block until every table has a ready manifest.

        Raises:
            StoreTimeoutError: If any table is missing or not ready when
                ``timeout_s`` elapses.
        """
        pending = [table_value(t) for t in tables]
        deadline = time.monotonic() + timeout_s
        while True:
            still: list[str] = []
            for tname in pending:
                m = load_manifest(self.settings, tname)
                if m is None or m.state != "ready":
                    still.append(tname)
            if not still:
                return
            if time.monotonic() >= deadline:
                raise StoreTimeoutError(
                    f"tables not ready after {timeout_s}s: {still!r}", tables=still
                )
            pending = still
            time.sleep(self.settings.ready_poll_interval_s)

    def table_info(self, table: TableRef) -> LiveSchema:
        return self._manifest(table).live_schema()

    # ---------------------------------------------------------------------
    # Indexes and layout
    # ---------------------------------------------------------------------
    def add_table_index(self, table: TableRef, field: str) -> None:
        """
        Add an index on ``field`` of the current field order.

        Raises:
            SchemaError: If the field is not part of the current order or is the key.
            StoreError: If the position already carries an index.
        """
        with self._locked(table):
            m = self._manifest(table)
            pos = index_position(field, m.attributes)
            if pos == 2:
                raise SchemaError(f"the key {field!r} of table {m.table!r} cannot carry an index")
            if pos in m.index:
                raise StoreError(f"index on {field!r} of table {m.table!r} already exists")
            m.index = sorted([*m.index, pos])
            self._commit_manifest(m)

    def del_table_index(self, table: TableRef, field: str) -> None:
        """
        Drop the index on ``field`` of the current field order.

        Raises:
            IndexMissingError: If the field carries no index.
        """
        with self._locked(table):
            m = self._manifest(table)
            pos = index_position(field, m.attributes)
            if pos not in m.index:
                raise IndexMissingError(f"no index on {field!r} of table {m.table!r}")
            m.index = [i for i in m.index if i != pos]
            self._commit_manifest(m)

    def transform_table(
        self,
        table: TableRef,
        fn: Callable[[Record], Record],
        new_fields: Sequence[str],
    ) -> None:
        """
        Rewrite every record with ``fn`` and switch the table to ``new_fields``.

        All records are transformed in memory first; the new part and the new
        field order are then committed together by one manifest rename.

        Raises:
            TransformError: If ``fn`` fails or returns a record that does not fit
                ``new_fields``. Nothing is committed.
            StoreWriteError: If the commit fails. The previous generation stays live.
        """
        new_fields = list(new_fields)
        if not new_fields or len(set(new_fields)) != len(new_fields):
            raise TransformError(f"invalid field order {new_fields!r}")
        with self._locked(table):
            m = self._manifest(table)
            out: list[Record] = []
            for rec in self._records(m):
                try:
                    new = fn(rec)
                except Exception as exc:
                    raise TransformError(
                        f"transform of table {m.table!r} failed on key {rec.key!r}: {exc}"
                    ) from exc
                if new.tag != m.record_type or len(new.values) != len(new_fields):
                    raise TransformError(
                        f"transform of table {m.table!r} produced {new!r} for {new_fields!r}"
                    )
                out.append(new)

            kept = [i for i in m.index if i <= len(new_fields) + 1 and i != 2]
            for pos in sorted(set(m.index) - set(kept)):
                logger.debug("Index position %d of %s no longer applies", pos, m.table)
            m.attributes = new_fields
            m.index = kept
            self._commit(m, out)

    # ---------------------------------------------------------------------
    # Records
    # ---------------------------------------------------------------------
    def write(self, table: TableRef, record: Record) -> None:
        """Insert ``record``, replacing any record with the same key."""
        with self._locked(table):
            m = self._manifest(table)
            self._check_record(m, record)
            records = [r for r in self._records(m) if r.key != record.key]
            records.append(record)
            self._commit(m, records)

    def read(self, table: TableRef, key: Any) -> list[Record]:
        with self._locked(table, shared=True):
            m = self._manifest(table)
            df = self._frame(m)
            return self._to_records(df.filter(pl.col(m.attributes[0]) == _encode(key)))

    def index_read(self, table: TableRef, value: Any, field: str) -> list[Record]:
        """
        Records whose ``field`` equals ``value``.

        Raises:
            IndexMissingError: If ``field`` carries no index.
        """
        with self._locked(table, shared=True):
            m = self._manifest(table)
            pos = index_position(field, m.attributes)
            if pos not in m.index:
                raise IndexMissingError(f"no index on {field!r} of table {m.table!r}")
            df = self._frame(m)
            return self._to_records(df.filter(pl.col(field) == _encode(value)))

    def all_keys(self, table: TableRef) -> list[Any]:
        with self._locked(table, shared=True):
            m = self._manifest(table)
            df = self._frame(m)
            return [json_loads(v) for v in df.get_column(m.attributes[0]).to_list()]

    def match_object(self, table: TableRef, pattern: Mapping[str, Any]) -> list[Record]:
        """
        Records whose named fields equal the pattern's values; other fields are wildcards.

        Raises:
            SchemaError: If the pattern names a field the table does not have.
        """
        with self._locked(table, shared=True):
            m = self._manifest(table)
            unknown = [f for f in pattern if f not in m.attributes]
            if unknown:
                raise SchemaError(f"table {m.table!r} has no fields {unknown!r}")
            df = self._frame(m)
            if pattern:
                cond = reduce(
                    lambda acc, e: acc & e,
                    [pl.col(f) == _encode(v) for f, v in pattern.items()],
                )
                df = df.filter(cond)
            return self._to_records(df)

    def delete_object(self, table: TableRef, record: Record) -> None:
        """Delete stored records equal to ``record``; no-op if none is."""
        with self._locked(table):
            m = self._manifest(table)
            self._check_record(m, record)
            records = self._records(m)
            remaining = [r for r in records if not _same(r, record)]
            if len(remaining) != len(records):
                self._commit(m, remaining)

    def delete(self, table: TableRef, key: Any) -> None:
        with self._locked(table):
            m = self._manifest(table)
            records = self._records(m)
            remaining = [r for r in records if r.key != key]
            if len(remaining) != len(records):
                self._commit(m, remaining)

    # ---------------------------------------------------------------------
    # Housekeeping
    # ---------------------------------------------------------------------
    def orphan_parts(self, table: TableRef) -> list[str]:
        """Part files in the table directory that the manifest does not name."""
        with self._locked(table, shared=True):
            m = self._manifest(table)
            return [
                name
                for name in listdir(table_dir(self.settings, m.table))
                if is_part_name(name) and name != m.part
            ]
