"""
Core exception types raised by catalog validation and schema reconciliation.

Provides typed exceptions for core-domain failures:
- SchemaError for record/field layout violations.
- CatalogError for invalid table definitions (unknown options, index fields
  that are not declared fields).
- ReconcileError for reconciliation steps the store refused to apply.

Notes:
    - Store-level failures (timeouts, write errors, missing tables) live in
      loradb.store.errors; reconcilers wrap them in ReconcileError where the
      failure must be reported as a bootstrap failure.
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
    "CatalogError",
    "ReconcileError",
]


class SchemaError(ValueError):
    """Record or field-layout violation (arity mismatch, unknown field name)."""


class CatalogError(SchemaError):
    """Invalid table definition (unrecognized option, undeclared index field)."""


class ReconcileError(RuntimeError):
    """A schema reconciliation step failed; the table is not usable."""
