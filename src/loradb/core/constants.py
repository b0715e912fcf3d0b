"""
loradb core defaults.

Defines retention, readiness and storage defaults consumed by the store and
maintenance layers. This module is zero-IO and uses only the Python standard
library.

Notes:
    - StoreSettings (loradb.store.config) sources its defaults from here.
    - Changing RETENTION_LIMIT changes how many rxframes survive a trim pass
      per device.
"""

from __future__ import annotations

__all__ = [
    "RETENTION_LIMIT",
    "READY_TIMEOUT_S",
    "READY_POLL_INTERVAL_S",
    "COMPRESSION",
    "DEFAULT_NODE",
    "STORE_FORMAT_VERSION",
]

# Most recent rxframes kept per device after a trim pass.
RETENTION_LIMIT: int = 50

# Bounded wait for a table to report ready after create/open.
READY_TIMEOUT_S: float = 2.0

READY_POLL_INTERVAL_S: float = 0.05

# Default compression codec for Parquet parts written by ParquetStore.
COMPRESSION: str = "zstd"

# Node name recorded against disc_copies tables.
DEFAULT_NODE: str = "nonode@nohost"

# Bumped when the on-disk manifest/part layout changes.
STORE_FORMAT_VERSION: int = 1
