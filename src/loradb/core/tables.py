"""
Frozen table definitions for the loradb catalog.

Notes:
    - A definition declares the field order (from the table's row model), the
      secondary index fields, the storage tier, the record type tag and the
      key discipline (set or ordered_set).
    - Definitions are built from an explicit option mapping by
      ``TableDefinition.from_options``; unrecognized options raise CatalogError.
    - Core is zero-IO (stdlib + pydantic only); loradb.db materializes
      definitions against a store.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from pydantic import BaseModel

from .errors import CatalogError
from .grammar import (
    RecordType,
    StorageTier,
    TableKind,
    TableName,
    is_lower_snake,
    record_type_from_value,
    storage_tier_from_value,
    table_kind_from_value,
)
from .records import index_position
from .schema import (
    Connector,
    Device,
    Gateway,
    Handler,
    IgnoredLink,
    Link,
    MulticastGroup,
    Pending,
    RxFrame,
    TxFrame,
    User,
    record_fields,
)

__all__ = [
    "TableDefinition",
    "TABLE_OPTIONS",
    "get_table",
    "list_tables",
    "row_model",
]

# The only options a table declaration may carry.
TABLE_OPTIONS: Final[frozenset[str]] = frozenset(
    {"attributes", "index", "tier", "record_type", "kind"}
)


@dataclass(frozen=True)
class TableDefinition:
    """
    Frozen declaration of one table.

    Attributes:
        name (TableName): Canonical table identifier.
        fields (tuple[str, ...]): Declared field order; the first field is the key.
        index (tuple[str, ...]): Fields with a secondary index (subset of fields,
            never the key).
        tier (StorageTier): Storage tier.
        record_type (RecordType): Tag carried by every record.
        kind (TableKind): Key discipline.
        nodes (tuple[str, ...]): Nodes holding copies; empty means the local node.

    Examples:
        >>> from loradb.core.tables import get_table
        >>> from loradb.core.grammar import TableName
        >>> rx = get_table(TableName.RXFRAMES)
        >>> rx.index, rx.index_positions()
        (('mac', 'devaddr'), [3, 8])
    """

    name: TableName
    fields: tuple[str, ...]
    index: tuple[str, ...] = ()
    tier: StorageTier = StorageTier.DISC_COPIES
    record_type: RecordType = RecordType.USER
    kind: TableKind = TableKind.SET
    nodes: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.fields:
            raise CatalogError(f"{self.name.value}: at least one field is required")
        if len(set(self.fields)) != len(self.fields):
            raise CatalogError(f"{self.name.value}: duplicate field names {list(self.fields)!r}")
        for f in self.fields:
            if not is_lower_snake(f):
                raise CatalogError(f"{self.name.value}: field {f!r} is not lower_snake")
        for f in self.index:
            if f not in self.fields:
                raise CatalogError(f"{self.name.value}: index field {f!r} is not a declared field")
            if f == self.fields[0]:
                raise CatalogError(f"{self.name.value}: the key {f!r} cannot carry an index")

    @property
    def key(self) -> str:
        return self.fields[0]

    def index_positions(self) -> list[int]:
        """Sorted tagged-tuple positions of the declared index fields."""
        return sorted(index_position(f, self.fields) for f in self.index)

    def to_options(self) -> dict[str, Any]:
        """Inverse of from_options (enum values serialized as strings)."""
        return {
            "attributes": list(self.fields),
            "index": list(self.index),
            "tier": self.tier.value,
            "record_type": self.record_type.value,
            "kind": self.kind.value,
        }

    @classmethod
    def from_options(
        cls,
        name: TableName,
        options: Mapping[str, Any],
        nodes: Sequence[str] = (),
    ) -> TableDefinition:
        """
        Build a definition from a declaration mapping.

        Args:
            name (TableName): Table identifier.
            options (Mapping[str, Any]): Exactly the keys in TABLE_OPTIONS;
                "attributes" and "record_type" are required, the rest default
                (index=[], tier="disc_copies", kind="set").
            nodes (Sequence[str]): Nodes holding copies.

        Raises:
            CatalogError: Unknown option, missing required option, or invalid value.
        """
        unknown = sorted(set(options) - TABLE_OPTIONS)
        if unknown:
            raise CatalogError(f"{name.value}: unrecognized table options {unknown!r}")
        for required in ("attributes", "record_type"):
            if required not in options:
                raise CatalogError(f"{name.value}: option {required!r} is required")
        try:
            record_type = options["record_type"]
            if not isinstance(record_type, RecordType):
                record_type = record_type_from_value(str(record_type))
            tier = options.get("tier", StorageTier.DISC_COPIES)
            if not isinstance(tier, StorageTier):
                tier = storage_tier_from_value(str(tier))
            kind = options.get("kind", TableKind.SET)
            if not isinstance(kind, TableKind):
                kind = table_kind_from_value(str(kind))
        except ValueError as exc:
            raise CatalogError(f"{name.value}: {exc}") from exc
        return cls(
            name=name,
            fields=tuple(options["attributes"]),
            index=tuple(options.get("index", ())),
            tier=tier,
            record_type=record_type,
            kind=kind,
            nodes=tuple(nodes),
        )


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------

_MODELS: dict[TableName, type[BaseModel]] = {
    TableName.USERS: User,
    TableName.GATEWAYS: Gateway,
    TableName.MULTICAST_GROUPS: MulticastGroup,
    TableName.DEVICES: Device,
    TableName.LINKS: Link,
    TableName.IGNORED_LINKS: IgnoredLink,
    TableName.PENDING: Pending,
    TableName.TXFRAMES: TxFrame,
    TableName.RXFRAMES: RxFrame,
    TableName.CONNECTORS: Connector,
    TableName.HANDLERS: Handler,
}


def _declare(name: TableName, record_type: RecordType, **options: Any) -> TableDefinition:
    return TableDefinition.from_options(
        name,
        {
            "record_type": record_type,
            "attributes": record_fields(_MODELS[name]),
            "tier": StorageTier.DISC_COPIES,
            **options,
        },
    )


# Registry, in bootstrap order
_TABLES: dict[TableName, TableDefinition] = {
    d.name: d
    for d in (
        _declare(TableName.USERS, RecordType.USER),
        _declare(TableName.GATEWAYS, RecordType.GATEWAY),
        _declare(TableName.MULTICAST_GROUPS, RecordType.MULTICAST_GROUP),
        _declare(TableName.DEVICES, RecordType.DEVICE, index=["link"]),
        _declare(TableName.LINKS, RecordType.LINK),
        _declare(TableName.IGNORED_LINKS, RecordType.IGNORED_LINK),
        _declare(TableName.PENDING, RecordType.PENDING),
        _declare(TableName.TXFRAMES, RecordType.TXFRAME, kind=TableKind.ORDERED_SET),
        _declare(TableName.RXFRAMES, RecordType.RXFRAME, index=["mac", "devaddr"]),
        _declare(TableName.CONNECTORS, RecordType.CONNECTOR),
        _declare(TableName.HANDLERS, RecordType.HANDLER),
    )
}


def get_table(name: TableName) -> TableDefinition:
    """
    Look up a table definition by canonical name.

    Args:
        name (TableName): Canonical table name.

    Returns:
        TableDefinition: Definition for the requested table.
    """
    return _TABLES[name]


def list_tables() -> list[TableDefinition]:
    """
    Return all declared table definitions.

    Returns:
        list[TableDefinition]: Definitions in bootstrap order.
    """
    return list(_TABLES.values())


def row_model(name: TableName) -> type[BaseModel]:
    """Pydantic row model whose field order defines ``name``'s attributes."""
    return _MODELS[name]
