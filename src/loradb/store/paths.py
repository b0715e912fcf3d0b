"""
Path and layout helpers for loradb.store.

Layout (file protocol)
- <root>/schema.json
- <root>/tables/<table_name>/manifest.json
- <root>/tables/<table_name>/part-<UUID>.parquet
- <root>/tables/<table_name>/.lock

Notes
- A table's manifest names exactly one live part; older parts are garbage
  once a newer manifest has been committed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .config import StoreSettings

_MANIFEST_NAME: Final[str] = "manifest.json"
_SCHEMA_NAME: Final[str] = "schema.json"
_PART_PREFIX: Final[str] = "part-"
_LOCK_NAME: Final[str] = ".lock"


def schema_path(settings: StoreSettings) -> str:
    """Path "<root>/schema.json" (present once the schema has been created)."""
    return os.path.join(settings.root_dir, _SCHEMA_NAME)


def tables_root(settings: StoreSettings) -> str:
    """Path "<root>/tables"."""
    return os.path.join(settings.root_dir, "tables")


def table_dir(settings: StoreSettings, table_name: str) -> str:
    """Path "<root>/tables/<table_name>"."""
    return os.path.join(tables_root(settings), table_name)


def manifest_path(settings: StoreSettings, table_name: str) -> str:
    """Path "<root>/tables/<table_name>/manifest.json"."""
    return os.path.join(table_dir(settings, table_name), _MANIFEST_NAME)


def lock_path(settings: StoreSettings, table_name: str) -> str:
    """Path "<root>/tables/<table_name>/.lock" (held while a call reads or commits)."""
    return os.path.join(table_dir(settings, table_name), _LOCK_NAME)


def is_part_name(name: str) -> bool:
    return name.startswith(_PART_PREFIX) and name.endswith(".parquet")


@dataclass(slots=True, frozen=True)
class PartPaths:
    """
    Container for a part's temporary and final file paths.

    Attributes:
        tmp_path (str): Temporary file path used for the initial write ("*.parquet.tmp").
        final_path (str): Final file path after atomic rename ("*.parquet").
    """

    tmp_path: str
    final_path: str

    @property
    def name(self) -> str:
        return os.path.basename(self.final_path)


def part_paths(settings: StoreSettings, table_name: str, uuid_str: str) -> PartPaths:
    """
    Compute temporary and final part file paths for a table generation.

    Args:
        settings (StoreSettings): Store settings.
        table_name (str): Table name.
        uuid_str (str): Hex string used to build a unique part name.
    """
    base_dir = table_dir(settings, table_name)
    base_name = f"{_PART_PREFIX}{uuid_str}.parquet"
    return PartPaths(
        tmp_path=os.path.join(base_dir, base_name + ".tmp"),
        final_path=os.path.join(base_dir, base_name),
    )
