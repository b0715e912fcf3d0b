"""
Startup schema reconciliation.

``ensure_tables`` walks the catalog in declaration order. A missing table is
created, awaited and seeded; an existing one is awaited and reconciled (indexes,
then field layout). Failures propagate: a node that cannot reconcile its schema
should not start serving.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from loradb.core.grammar import TableName
from loradb.core.schema import User, to_record
from loradb.core.tables import TableDefinition, list_tables
from loradb.store.client import StoreClient
from loradb.store.config import StoreSettings

from .indexes import ensure_indexes

logger = logging.getLogger(__name__)


def _seed_users(store: StoreClient, definition: TableDefinition, settings: StoreSettings) -> None:
    logger.info("Database create default user %s:%s", settings.admin_user, "*" * 8)
    admin = User(name=settings.admin_user, password=settings.admin_pass)
    store.write(definition.name.value, to_record(admin, definition.record_type.value, definition.fields))


_SEEDERS: dict[TableName, Callable[[StoreClient, TableDefinition, StoreSettings], None]] = {
    TableName.USERS: _seed_users,
}


def set_defaults(store: StoreClient, definition: TableDefinition, settings: StoreSettings) -> None:
    """Seed a freshly created table. Only ``users`` has defaults (one admin account)."""
    seeder = _SEEDERS.get(definition.name)
    if seeder is not None:
        seeder(store, definition, settings)


def ensure_table(store: StoreClient, definition: TableDefinition, settings: StoreSettings) -> None:
    """
    Make one table exist with its declared indexes and field order.

    Args:
        store (StoreClient): Target store.
        definition (TableDefinition): Declared table.
        settings (StoreSettings): Readiness timeout and admin credentials.

    Raises:
        StoreTimeoutError: The table did not become ready in time.
        StoreError: Creation failed.
        ReconcileError: Index or field reconciliation failed.

    Notes:
        Running it twice in a row is a no-op the second time: no creation,
        no index change, no transform.
    """
    tname = definition.name.value
    if tname in store.tables():
        store.wait_for_tables([tname], settings.ready_timeout_s)
        ensure_indexes(store, definition)
        return

    logger.info("Database create %s", tname)
    store.create_table(definition)
    store.wait_for_tables([tname], settings.ready_timeout_s)
    set_defaults(store, definition, settings)


def ensure_tables(
    store: StoreClient,
    settings: StoreSettings,
    tables: Iterable[TableDefinition] | None = None,
) -> None:
    """
    Create the schema if needed, then ensure every table (default: the full catalog).
    """
    if not store.has_schema():
        logger.info("Database create schema")
        store.create_schema()
    for definition in list_tables() if tables is None else tables:
        ensure_table(store, definition, settings)
