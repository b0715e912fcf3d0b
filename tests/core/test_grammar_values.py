from __future__ import annotations

import pytest

from loradb.core.grammar import (
    RecordType,
    StorageTier,
    TableKind,
    TableName,
    is_lower_snake,
    record_type_from_value,
    storage_tier_from_value,
    table_kind_from_value,
    table_name_from_value,
)


def test_enum_values_are_lower_snake() -> None:
    for enum in (TableName, RecordType, StorageTier, TableKind):
        for member in enum:
            assert is_lower_snake(member.value), f"{enum.__name__}.{member.name}"


def test_parsers_roundtrip() -> None:
    assert table_name_from_value("multicast_groups") is TableName.MULTICAST_GROUPS
    assert record_type_from_value("rxframe") is RecordType.RXFRAME
    assert storage_tier_from_value("ram_copies") is StorageTier.RAM_COPIES
    assert table_kind_from_value("ordered_set") is TableKind.ORDERED_SET


@pytest.mark.parametrize("bad", ["RxFrames", "rx-frames", "frames", ""])
def test_table_name_rejects(bad: str) -> None:
    with pytest.raises(ValueError):
        table_name_from_value(bad)
