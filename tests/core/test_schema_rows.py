from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from loradb.core.errors import SchemaError
from loradb.core.records import Record
from loradb.core.schema import (
    Link,
    RxFrame,
    User,
    as_utc,
    from_record,
    normalize_hex,
    record_fields,
    to_record,
)


def test_normalize_hex() -> None:
    assert normalize_hex("00:11:aa:bb") == "0011AABB"
    assert normalize_hex("b8-27-eb-ff") == "B827EBFF"
    for bad in ("", "zz", None, 12):
        with pytest.raises(SchemaError):
            normalize_hex(bad)


def test_to_record_uses_json_values() -> None:
    when = datetime(2026, 1, 1, tzinfo=UTC)
    frame = RxFrame(frid=5, mac="b827ebfffe000001", devaddr="0011aabb", rxq={"rssi": -70}, datetime=when)

    rec = to_record(frame, "rxframe")

    assert rec.tag == "rxframe"
    assert rec.key == 5
    data = rec.as_dict(record_fields(RxFrame))
    assert data["devaddr"] == "0011AABB"
    assert data["mac"] == "B827EBFFFE000001"
    assert isinstance(data["datetime"], str)

    back = from_record(RxFrame, rec, record_fields(RxFrame))
    assert back == frame


def test_to_record_follows_given_field_order() -> None:
    link = Link(devaddr="0011aabb", desc="x")
    rec = to_record(link, "link", ["desc", "devaddr"])
    assert rec.values == ("x", "0011AABB")


def test_from_record_rejects_unknown_fields() -> None:
    rec = Record("user", ("admin", "secret", "extra"))
    with pytest.raises(ValidationError):
        from_record(User, rec, ["name", "password", "role"])


def test_naive_datetimes_are_read_as_utc() -> None:
    naive = datetime(2026, 3, 1, 12)
    assert as_utc(None) is None
    assert as_utc(naive) == naive.replace(tzinfo=UTC)
    aware = datetime(2026, 3, 1, 12, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(aware) is aware

    assert Link(devaddr="0011AABB", last_reset=naive).last_reset == naive.replace(tzinfo=UTC)
    frame = RxFrame(frid=1, mac="AA", devaddr="0011AABB", datetime="2026-03-01T12:00:00")
    assert frame.datetime.tzinfo is not None
