"""
Count-bounded retention of received frames.

A trim pass keeps the newest ``limit`` rxframes of every device that has a
link. Expired frames are deleted by value, so a frame stored after the pass
took its snapshot is never touched by that pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from loradb.core.constants import RETENTION_LIMIT
from loradb.core.errors import SchemaError
from loradb.core.grammar import TableName
from loradb.store.client import StoreClient
from loradb.store.errors import StoreError

from .frames import get_last_rxframes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrimSummary:
    """
    Outcome of one trim pass.

    Attributes:
        devices (int): Links visited.
        expired (int): Frames deleted across all devices.
        failed (list[str]): Devices whose trim raised; the pass went on.
    """

    devices: int = 0
    expired: int = 0
    failed: list[str] = field(default_factory=list)


def trim_rxframes(store: StoreClient, devaddr: str, limit: int = RETENTION_LIMIT) -> int:
    """
    Delete all but the newest ``limit`` rxframes of one device.

    Returns:
        int: Number of frames deleted.

    Notes:
        - One ``delete_object`` per expired frame, so frames stored since the
          snapshot survive.
        - On ParquetStore every ``delete_object`` rewrites the whole rxframes
          part, so a pass costs O(expired x stored rxframes). Passes that run
          often keep ``expired`` small.
    """
    expired, _ = get_last_rxframes(store, devaddr, limit)
    for rec in expired:
        store.delete_object(TableName.RXFRAMES.value, rec)
    if expired:
        logger.debug("Expired %d rxframes from %s", len(expired), devaddr)
    return len(expired)


def trim_tables(store: StoreClient, limit: int = RETENTION_LIMIT) -> TrimSummary:
    """
    Run one trim pass over every device in ``links``.

    Returns:
        TrimSummary: Devices visited, frames expired, devices that failed.

    Raises:
        StoreError: Only if the link keys themselves cannot be listed.
    """
    devices = store.all_keys(TableName.LINKS.value)
    expired = 0
    failed: list[str] = []
    for devaddr in devices:
        try:
            expired += trim_rxframes(store, devaddr, limit)
        except (StoreError, SchemaError):
            logger.exception("Failed to trim rxframes of %s", devaddr)
            failed.append(str(devaddr))
    return TrimSummary(devices=len(devices), expired=expired, failed=failed)
