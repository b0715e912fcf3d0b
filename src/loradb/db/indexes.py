"""
Secondary-index reconciliation.

Index positions depend on the field order, and the field order may change in
the middle of reconciliation (ensure_fields runs between the drop and add
phases). Each phase therefore resolves positions against the layout in effect
at that moment and skips positions that layout cannot hold:

    drop  positions only in current, resolved against the current order
    ----  ensure_fields (layout switches to the declared order)
    add   positions only in desired, resolved against the declared order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from loradb.core.errors import ReconcileError
from loradb.core.records import field_at_position
from loradb.core.tables import TableDefinition
from loradb.store.client import StoreClient
from loradb.store.errors import StoreError

from .fields import ensure_fields

logger = logging.getLogger(__name__)


def _within(position: int, field_count: int) -> bool:
    return 2 <= position <= field_count + 1


def positions_to_drop(
    current: Iterable[int], desired: Iterable[int], field_count: int
) -> list[int]:
    """
    Positions indexed now but not declared, that the current layout can hold.

    Examples:
        >>> positions_to_drop([3, 5], [3], field_count=4)
        [5]
        >>> positions_to_drop([3, 9], [], field_count=4)
        [3]
    """
    want = set(desired)
    return [p for p in sorted(set(current)) if p not in want and _within(p, field_count)]


def positions_to_add(
    current: Iterable[int], desired: Iterable[int], field_count: int
) -> list[int]:
    """Positions declared but not indexed now, that the declared layout can hold."""
    have = set(current)
    return [p for p in sorted(set(desired)) if p not in have and _within(p, field_count)]


def ensure_indexes(store: StoreClient, definition: TableDefinition) -> None:
    """
    Converge a live table's indexes and field order on its definition.

    Args:
        store (StoreClient): Store holding the table.
        definition (TableDefinition): Declared layout and index fields.

    Raises:
        ReconcileError: An index operation or the field migration failed.
    """
    tname = definition.name.value
    try:
        live = store.table_info(tname)
        old_attrs = list(live.attributes)
        current = sorted(live.index)
        desired = definition.index_positions()

        if current == desired:
            ensure_fields(store, definition)
            return

        logger.info("Database index update %s: %s to %s", tname, current, desired)

        drop = positions_to_drop(current, desired, len(old_attrs))
        for pos in sorted(set(current) - set(desired) - set(drop)):
            logger.debug("Skipping drop of index position %d on %s: out of range", pos, tname)
        for pos in drop:
            store.del_table_index(tname, field_at_position(pos, old_attrs))

        ensure_fields(store, definition)

        add = positions_to_add(current, desired, len(definition.fields))
        for pos in sorted(set(desired) - set(current) - set(add)):
            logger.debug("Skipping add of index position %d on %s: out of range", pos, tname)
        for pos in add:
            store.add_table_index(tname, field_at_position(pos, definition.fields))
    except StoreError as exc:
        raise ReconcileError(f"failed to update indexes of table {tname!r}: {exc}") from exc
