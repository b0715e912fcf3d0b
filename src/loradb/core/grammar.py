"""
Canonical loradb grammar and helpers.

Defines table names, record type tags, storage tiers and table kinds, plus
zero-IO validators used across the stack.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (manifest/Parquet metadata): lower_snake
   - Field names and columns elsewhere: lower_snake

2) Tables vs. record types:
   - TableName is where records live (plural, e.g. "rxframes").
   - RecordType is the tag every record in that table carries (singular,
     e.g. "rxframe"). A table holds exactly one record type.

Downstream usage
----------------
- loradb.core.tables builds TableDefinition instances from these enums.
- loradb.store persists enum values in table manifests and parses them back
  with the *_from_value helpers.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Final

__all__ = [
    "TableName",
    "RecordType",
    "StorageTier",
    "TableKind",
    "is_lower_snake",
    "assert_lower_snake",
    "table_name_from_value",
    "record_type_from_value",
    "storage_tier_from_value",
    "table_kind_from_value",
]


class TableName(Enum):
    """
    Canonical table names declared by the catalog.
    """

    USERS = "users"
    GATEWAYS = "gateways"
    MULTICAST_GROUPS = "multicast_groups"
    DEVICES = "devices"
    LINKS = "links"
    IGNORED_LINKS = "ignored_links"
    PENDING = "pending"
    TXFRAMES = "txframes"
    RXFRAMES = "rxframes"
    CONNECTORS = "connectors"
    HANDLERS = "handlers"


class RecordType(Enum):
    """
    Tag carried by every record; one per table.
    """

    USER = "user"
    GATEWAY = "gateway"
    MULTICAST_GROUP = "multicast_group"
    DEVICE = "device"
    LINK = "link"
    IGNORED_LINK = "ignored_link"
    PENDING = "pending"
    TXFRAME = "txframe"
    RXFRAME = "rxframe"
    CONNECTOR = "connector"
    HANDLER = "handler"


class StorageTier(Enum):
    """
    Durability/replication class of a table.

    Notes:
        - disc_copies: persisted and loaded into memory (the default tier).
        - ram_copies: memory only on the listed nodes.
        - disc_only_copies: persisted, not cached.
    """

    DISC_COPIES = "disc_copies"
    RAM_COPIES = "ram_copies"
    DISC_ONLY_COPIES = "disc_only_copies"


class TableKind(Enum):
    """
    Key discipline of a table.

    Notes:
        - set: unique primary key (first field), unordered.
        - ordered_set: unique primary key, records kept sorted by key.
    """

    SET = "set"
    ORDERED_SET = "ordered_set"


# ============================================================================
# Helpers & Validators (zero I/O)
# ============================================================================

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "last_reset"), False otherwise.

    Examples:
      >>> is_lower_snake("last_reset")
      True
      >>> is_lower_snake("LastReset")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Args:
      value (str): Candidate string to validate.
      what (str): Human-friendly label used in the error message.

    Raises:
      ValueError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise ValueError(f"{what} must be lower_snake (got: {value!r})")


def table_name_from_value(s: str) -> TableName:
    """
    Parse a lower_snake table name into a TableName.

    Raises:
      ValueError: If s is not lower_snake or is not a known table.
    """
    assert_lower_snake(s, "table name")
    return TableName(s)


def record_type_from_value(s: str) -> RecordType:
    """
    Parse a lower_snake record tag into a RecordType.

    Raises:
      ValueError: If s is not lower_snake or is not a known record type.
    """
    assert_lower_snake(s, "record_type")
    return RecordType(s)


def storage_tier_from_value(s: str) -> StorageTier:
    """Parse a lower_snake storage tier ("disc_copies", ...) into a StorageTier."""
    assert_lower_snake(s, "tier")
    return StorageTier(s)


def table_kind_from_value(s: str) -> TableKind:
    """Parse "set" or "ordered_set" into a TableKind."""
    assert_lower_snake(s, "kind")
    return TableKind(s)
