"""
Field-layout reconciliation.

Brings a live table's field order in line with its definition by one atomic,
name-keyed transform of every record (see loradb.core.records.reproject).
"""

from __future__ import annotations

import logging

from loradb.core.errors import ReconcileError
from loradb.core.records import Record, reproject
from loradb.core.tables import TableDefinition
from loradb.store.client import StoreClient
from loradb.store.errors import StoreError

logger = logging.getLogger(__name__)


def ensure_fields(store: StoreClient, definition: TableDefinition) -> bool:
    """
    Migrate a table to the declared field order if it differs.

    Args:
        store (StoreClient): Store holding the table.
        definition (TableDefinition): Declared layout.

    Returns:
        bool: True if a migration ran, False if the layout already matched.

    Raises:
        ReconcileError: The store rejected the transform. Nothing was migrated.

    Notes:
        - Values move by field name: kept names keep their value, new names start
          as None, removed names are dropped.
        - A renamed field loses its data (remove + add).
    """
    tname = definition.name.value
    try:
        old = list(store.table_info(tname).attributes)
        new = list(definition.fields)
        if old == new:
            return False

        logger.info("Database fields update %s: %s to %s", tname, old, new)

        def migrate(rec: Record) -> Record:
            return reproject(rec, old, new)

        store.transform_table(tname, migrate, new)
    except StoreError as exc:
        raise ReconcileError(f"failed to update fields of table {tname!r}: {exc}") from exc
    return True
