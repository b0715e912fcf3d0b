"""
Per-table manifest data structures and helpers.

Manifest layout (JSON at <table_dir>/manifest.json):
{
  "table": "rxframes",
  "version": 1,
  "record_type": "rxframe",
  "kind": "set",
  "tier": "disc_copies",
  "nodes": ["nonode@nohost"],
  "attributes": ["frid", "mac", ...],
  "index": [3, 8],
  "part": "part-<UUID>.parquet",
  "rows": 123,
  "state": "ready",
  "created_at": "ISO-8601",
  "updated_at": "ISO-8601"
}

Notes:
- The manifest is the commit point of every table mutation: a new part is
  written and fsynced first, then the manifest naming it (and carrying the
  field order and index positions in effect for it) replaces the old one with
  an atomic rename. Readers that load the manifest therefore always see a part
  and a field order that belong together.
- "part" is relative to the table directory; null while the table is empty.
"""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from loradb.core.constants import STORE_FORMAT_VERSION

from .client import LiveSchema
from .config import StoreSettings
from .errors import StoreManifestError
from .fs import makedirs, open_write, remove_if_exists, rename_atomic
from .paths import manifest_path, schema_path

State = Literal["creating", "ready"]


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class TableManifest:
    """
    Manifest model persisted at <table_dir>/manifest.json.

    Attributes:
        table (str): Table name (lower_snake).
        record_type (str): Record tag of every row.
        kind (str): "set" or "ordered_set".
        tier (str): Storage tier value.
        nodes (list[str]): Nodes holding a copy.
        attributes (list[str]): Field order of the live part.
        index (list[int]): Sorted tagged-tuple positions carrying an index.
        part (str | None): Live part file name, or None when empty.
        rows (int): Row count of the live part.
        state (State): "creating" until the first commit, then "ready".
        version (int): Store format version.
        created_at (str): ISO-8601 creation timestamp.
        updated_at (str): ISO-8601 timestamp of the last commit.
    """

    table: str
    record_type: str
    kind: str
    tier: str
    attributes: list[str]
    index: list[int] = field(default_factory=list)
    nodes: list[str] = field(default_factory=list)
    part: str | None = None
    rows: int = 0
    state: State = "creating"
    version: int = STORE_FORMAT_VERSION
    created_at: str = field(default_factory=_utc_now_iso)
    updated_at: str = field(default_factory=_utc_now_iso)

    def live_schema(self) -> LiveSchema:
        return LiveSchema(attributes=tuple(self.attributes), index=tuple(sorted(self.index)))

    def to_json_obj(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> TableManifest:
        try:
            return cls(
                table=obj["table"],
                record_type=obj["record_type"],
                kind=obj["kind"],
                tier=obj["tier"],
                attributes=list(obj["attributes"]),
                index=sorted(int(i) for i in obj.get("index") or []),
                nodes=list(obj.get("nodes") or []),
                part=obj.get("part"),
                rows=int(obj.get("rows", 0)),
                state=obj.get("state", "ready"),
                version=int(obj.get("version", STORE_FORMAT_VERSION)),
                created_at=obj.get("created_at") or _utc_now_iso(),
                updated_at=obj.get("updated_at") or _utc_now_iso(),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreManifestError(f"malformed manifest: {exc}") from exc


# -----------------------------------------------------------------------------
# File I/O
# -----------------------------------------------------------------------------


def _write_json_atomic(final_path: str, obj: dict[str, Any]) -> None:
    makedirs(os.path.dirname(final_path), exist_ok=True)
    tmp_path = f"{final_path}.{uuid.uuid4().hex}.tmp"
    payload = json.dumps(obj, indent=2, sort_keys=False).encode("utf-8")
    try:
        with open_write(tmp_path) as fh:
            fh.write(payload)
        rename_atomic(tmp_path, final_path)
    except OSError:
        remove_if_exists(tmp_path)
        raise


def load_manifest(settings: StoreSettings, table_name: str) -> TableManifest | None:
    """
    Load a table's manifest.json if present.

    Returns:
        TableManifest | None: Parsed manifest model, or None if not found.

    Raises:
        StoreManifestError: If the file exists but cannot be parsed.
    """
    mpath = manifest_path(settings, table_name)
    if not os.path.exists(mpath):
        return None
    try:
        with open(mpath, encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise StoreManifestError(f"corrupt manifest for table {table_name!r}: {exc}") from exc
    return TableManifest.from_json_obj(data)


def write_manifest(settings: StoreSettings, manifest: TableManifest) -> None:
    """
    Persist manifest.json atomically and stamp updated_at.

    The write path is: serialize JSON → write to "<final>.<uuid>.tmp" → fsync →
    atomic rename to final path using os.replace (same filesystem).

    Raises:
        OSError: If filesystem operations fail (caller wraps in StoreWriteError).
    """
    manifest.updated_at = _utc_now_iso()
    _write_json_atomic(manifest_path(settings, manifest.table), manifest.to_json_obj())


def has_schema_marker(settings: StoreSettings) -> bool:
    return os.path.exists(schema_path(settings))


def write_schema_marker(settings: StoreSettings) -> None:
    """Write <root>/schema.json recording the owning node and format version."""
    _write_json_atomic(
        schema_path(settings),
        {"version": STORE_FORMAT_VERSION, "nodes": [settings.node], "created_at": _utc_now_iso()},
    )
