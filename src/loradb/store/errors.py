"""
Custom exceptions for the loradb.store module.

Purpose
- Provide store-layer error types that map cleanly to store responsibilities.
- Keep loradb.core as the source of truth for catalog/schema/reconcile errors
  (see loradb.core.errors).

Boundaries
- loradb.store raises Store* errors for filesystem, manifest and table-state
  concerns:
  - StoreConfigError: invalid or unsupported configuration.
  - NoSuchTableError / TableExistsError: table lifecycle violations.
  - StoreTimeoutError: tables did not report ready within the bounded wait.
  - StoreWriteError: atomic write path failed (tmp write/fsync/rename).
  - StoreManifestError: manifest missing, corrupt, or inconsistent.
  - IndexMissingError: index read/drop against a field without an index.
  - TransformError: a full-table transform was rejected; nothing was committed.
"""

from __future__ import annotations


class StoreError(Exception):
    """
    Base class for store-related errors in loradb.store.

    Notes:
        Use this as a catch-all for store-layer failures, distinct from loradb.core errors.
    """


class StoreConfigError(StoreError):
    """
    Raised when store configuration is invalid or unsupported.

    Examples:
        - Unsupported compression codec
        - Negative retention limit
    """


class NoSuchTableError(StoreError):
    """Raised when an operation names a table the store does not hold."""


class TableExistsError(StoreError):
    """Raised when create_table targets a table that already exists."""


class StoreTimeoutError(StoreError):
    """
    Raised when tables are not ready within the bounded readiness wait.

    Attributes:
        tables (list[str]): Tables still not ready when the wait expired.
    """

    def __init__(self, message: str, tables: list[str] | None = None) -> None:
        super().__init__(message)
        self.tables = list(tables or [])


class StoreWriteError(StoreError):
    """
    Raised when a write fails to complete atomically.

    Notes:
        The write path is tmp parquet → fsync → os.replace(tmp, final), then the
        manifest commit. Failures at any step surface as StoreWriteError (with
        best-effort cleanup of tmp files) and leave the previous generation live.
    """


class StoreManifestError(StoreError):
    """
    Raised when a table manifest is missing, corrupt, or inconsistent.
    """


class IndexMissingError(StoreError):
    """Raised when an index read or drop names a field that carries no index."""


class TransformError(StoreError):
    """
    Raised when a full-table transform cannot be applied.

    Notes:
        The transform function is applied to every record before anything is
        written; a failure on any record aborts the whole transform and leaves
        both the data and the field order unchanged.
    """
