"""
Frame reads and purges.

Helpers
- get_last_rxframes: split a device's uplinks into (expired, kept) by frid.
- get_rxframes: the kept window, hidden behind the device's last reset.
- purge_txframes: drop every queued downlink of one device.
"""

from __future__ import annotations

import logging
from typing import Any

from loradb.core.constants import RETENTION_LIMIT
from loradb.core.grammar import TableName
from loradb.core.records import Record
from loradb.core.schema import Link, RxFrame, from_record, normalize_hex
from loradb.store.client import StoreClient

logger = logging.getLogger(__name__)

_RX = TableName.RXFRAMES.value
_TX = TableName.TXFRAMES.value
_LINKS = TableName.LINKS.value


def get_last_rxframes(
    store: StoreClient, devaddr: str, count: int
) -> tuple[list[Record], list[Record]]:
    """
    Split the device's stored uplinks into the oldest surplus and the newest ``count``.

    Args:
        store (StoreClient): Store holding ``rxframes``.
        devaddr (str): Device address (any case).
        count (int): Window size.

    Returns:
        tuple[list[Record], list[Record]]: ``(expired, kept)``, each ascending by
        frid. ``expired`` is empty when the device has at most ``count`` frames.
    """
    attrs = list(store.table_info(_RX).attributes)
    frames = store.index_read(_RX, normalize_hex(devaddr, "devaddr"), "devaddr")
    frames.sort(key=lambda r: r.get("frid", attrs))
    surplus = max(len(frames) - max(count, 0), 0)
    return frames[:surplus], frames[surplus:]


def _last_reset(store: StoreClient, devaddr: str) -> Any:
    records = store.read(_LINKS, devaddr)
    if not records:
        return None
    attrs = list(store.table_info(_LINKS).attributes)
    return from_record(Link, records[0], attrs).last_reset


def get_rxframes(store: StoreClient, devaddr: str, limit: int = RETENTION_LIMIT) -> list[RxFrame]:
    """
    Recent uplinks of a device, oldest first.

    Frames received before the link's ``last_reset`` are left out; a device
    without a link, or a link that was never reset, gets the whole window.

    Examples:
        >>> get_rxframes(store, "0011aabb")  # doctest: +SKIP
        [RxFrame(frid=101, ...), RxFrame(frid=102, ...)]
    """
    devaddr = normalize_hex(devaddr, "devaddr")
    _, kept = get_last_rxframes(store, devaddr, limit)
    attrs = list(store.table_info(_RX).attributes)
    frames = [from_record(RxFrame, rec, attrs) for rec in kept]
    reset = _last_reset(store, devaddr)
    if reset is None:
        return frames
    return [f for f in frames if f.datetime >= reset]


def purge_txframes(store: StoreClient, devaddr: str) -> int:
    """Delete every queued downlink addressed to ``devaddr``; returns how many."""
    devaddr = normalize_hex(devaddr, "devaddr")
    queued = store.match_object(_TX, {"devaddr": devaddr})
    for rec in queued:
        store.delete_object(_TX, rec)
    if queued:
        logger.debug("Purged %d txframes of %s", len(queued), devaddr)
    return len(queued)
