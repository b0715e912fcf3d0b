"""
Tagged positional records and the name-keyed re-projection used by migrations.

A Record is the store's unit of data: a record type tag plus a tuple of
values aligned to whichever field order is in effect for its table. The
record itself does not know its field names; callers pair it with the field
order they read from the table definition or the live schema.

Index positions
---------------
Positions count the tag as position 1, so the field at 0-based offset ``k``
of the field order sits at position ``k + 2``. The primary key (the first
field) is therefore position 2 and is never a secondary index.

Notes:
    - Zero-IO; stdlib only.
    - ``reproject`` is the only migration primitive. It looks values up by
      field name, so reordering, adding and removing fields never shifts a
      value into the wrong slot.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import SchemaError

__all__ = [
    "Record",
    "reproject",
    "index_position",
    "field_at_position",
]


@dataclass(frozen=True, slots=True)
class Record:
    """
    Immutable tagged tuple.

    Attributes:
        tag (str): Record type value (e.g., "rxframe").
        values (tuple[Any, ...]): Values in the table's current field order.

    Examples:
        >>> rec = Record("link", ("0011AABB", None))
        >>> rec.as_dict(["devaddr", "last_reset"])
        {'devaddr': '0011AABB', 'last_reset': None}
        >>> rec.key
        '0011AABB'
    """

    tag: str
    values: tuple[Any, ...]

    @property
    def key(self) -> Any:
        """Primary key (value of the first field)."""
        return self.values[0]

    def as_dict(self, fields: Sequence[str]) -> dict[str, Any]:
        """
        Pair values with field names.

        Raises:
            SchemaError: If the number of values does not match the field order.
        """
        if len(fields) != len(self.values):
            raise SchemaError(
                f"{self.tag} record has {len(self.values)} values for {len(fields)} fields"
            )
        return dict(zip(fields, self.values))

    def get(self, field: str, fields: Sequence[str]) -> Any:
        try:
            return self.values[list(fields).index(field)]
        except ValueError:
            raise SchemaError(f"{self.tag} has no field {field!r}") from None

    def to_tuple(self) -> tuple[Any, ...]:
        """Flat tuple with the tag first (positions are 1-based into this)."""
        return (self.tag, *self.values)

    @classmethod
    def from_mapping(cls, tag: str, fields: Sequence[str], data: Mapping[str, Any]) -> Record:
        """
        Build a record by looking up each field name in a mapping.

        Missing names become None; names outside ``fields`` are ignored.
        """
        return cls(tag, tuple(data.get(f) for f in fields))


def reproject(record: Record, old_fields: Sequence[str], new_fields: Sequence[str]) -> Record:
    """
    Re-project a record from one field order to another by field name.

    Args:
        record (Record): Record laid out in ``old_fields`` order.
        old_fields (Sequence[str]): Field order the record's values follow.
        new_fields (Sequence[str]): Target field order.

    Returns:
        Record: Same tag; one value per name in ``new_fields``. Names present in
        both orders keep their value, names only in ``new_fields`` are None, names
        only in ``old_fields`` are dropped.

    Raises:
        SchemaError: If the record's arity does not match ``old_fields``.

    Notes:
        A renamed field is indistinguishable from a removed field plus a new
        one: its data is dropped and the new name starts as None.

    Examples:
        >>> old = Record("link", ("0011AABB", 7, "x"))
        >>> reproject(old, ["devaddr", "fcntup", "desc"], ["devaddr", "desc", "last_rx"])
        Record(tag='link', values=('0011AABB', 'x', None))
    """
    return Record.from_mapping(record.tag, new_fields, record.as_dict(old_fields))


def index_position(field: str, fields: Sequence[str]) -> int:
    """
    Position of ``field`` in the tagged tuple for field order ``fields``.

    Raises:
        SchemaError: If ``field`` is not part of ``fields``.
    """
    try:
        return list(fields).index(field) + 2
    except ValueError:
        raise SchemaError(f"field {field!r} not in {list(fields)!r}") from None


def field_at_position(position: int, fields: Sequence[str]) -> str:
    """
    Field name at a tagged-tuple position (inverse of ``index_position``).

    Raises:
        SchemaError: If the position falls on the tag or past the last field.
    """
    if position < 2 or position > len(fields) + 1:
        raise SchemaError(f"position {position} out of range for {len(fields)} fields")
    return fields[position - 2]
