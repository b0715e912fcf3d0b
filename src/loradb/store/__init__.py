"""
loradb.store: record store client interface and the bundled Parquet store.

## Responsibilities
- Define StoreClient, the primitive operations the maintenance layer calls
  (create, readiness wait, index add/drop, full-table transform, key/index
  reads, pattern match, delete-by-value).
- Provide ParquetStore, a local implementation with atomic tmp→rename parts
  and per-table manifests as the commit point.
- Carry runtime configuration (StoreSettings) with env > TOML > defaults.

## Public API
- StoreSettings: configuration (defaults sourced from loradb.core.constants).
- StoreClient, LiveSchema: the injected store interface.
- ParquetStore: bundled StoreClient.

## Import DAG discipline
- Depends only on stdlib, polars/pyarrow and loradb.core.*.
- MUST NOT import loradb.db or loradb.cli.

## Examples
```python
from loradb.store import ParquetStore, StoreSettings
from loradb.core.tables import get_table
from loradb.core.grammar import TableName

store = ParquetStore(StoreSettings(root_dir="db"))  # doctest: +SKIP
store.create_table(get_table(TableName.LINKS))  # doctest: +SKIP
store.wait_for_tables([TableName.LINKS], timeout_s=2.0)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .client import LiveSchema, StoreClient
from .config import StoreSettings
from .parquet import ParquetStore

__all__ = [
    "LiveSchema",
    "StoreClient",
    "StoreSettings",
    "ParquetStore",
]
