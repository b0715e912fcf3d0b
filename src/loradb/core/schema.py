"""
Pydantic v2 row models for every catalog table.

Each model declares the field order of its table: the catalog derives a
table's attributes from ``model_fields`` in declaration order, and the store
lays out record values in that order. Validators normalize hex identifiers
(device addresses, EUIs, gateway MACs) to upper case.

Style
- Zero-IO (stdlib + pydantic only).
- Row models are ``extra="forbid"`` so a record decoded from a stale layout
  fails loudly instead of silently carrying unknown fields.

Notes
- Keys are the first declared field of each model.
- Binary payloads are carried as hex strings; the store encodes values with
  pydantic's JSON mode, so datetimes round-trip as ISO-8601 strings.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import SchemaError
from .records import Record

__all__ = [
    "User",
    "Gateway",
    "MulticastGroup",
    "Device",
    "Link",
    "IgnoredLink",
    "Pending",
    "TxFrame",
    "RxFrame",
    "Connector",
    "Handler",
    "record_fields",
    "normalize_hex",
    "as_utc",
    "to_record",
    "from_record",
]

M = TypeVar("M", bound=BaseModel)


def normalize_hex(value: Any, what: str = "value") -> str:
    """
    Normalize a hex identifier to upper case without separators.

    Raises:
        SchemaError: If the value is not a non-empty hex string.

    Examples:
        >>> normalize_hex("00:11:aa:bb")
        '0011AABB'
    """
    if not isinstance(value, str):
        raise SchemaError(f"{what} must be a hex string (got: {value!r})")
    s = value.replace(":", "").replace("-", "").strip().upper()
    if not s or any(c not in "0123456789ABCDEF" for c in s):
        raise SchemaError(f"{what} must be a hex string (got: {value!r})")
    return s


def record_fields(model: type[BaseModel]) -> tuple[str, ...]:
    """Field order of a row model (declaration order)."""
    return tuple(model.model_fields.keys())


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    """
    Read naive datetimes as UTC; aware values pass through unchanged.

    Examples:
        >>> as_utc(dt.datetime(2026, 1, 1)).tzinfo
        datetime.timezone.utc
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=dt.UTC)


# ============================================================================
# Administration
# ============================================================================


class User(BaseModel):
    """
    Administrative account.

    Attributes:
        name (str): Login name (key).
        password (str): Password.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    password: str


# ============================================================================
# Network
# ============================================================================


class Gateway(BaseModel):
    """
    Packet forwarder registered with the server.

    Attributes:
        mac (str): Gateway MAC, 8 bytes hex (key).
        netid (str): Network identifier, 3 bytes hex.
        tx_rfch (int): RF chain used for downlinks.
        ant_gain (float | None): Antenna gain in dBi.
        desc (str | None): Free-form description.
        gpspos (tuple[float, float] | None): Latitude/longitude.
        gpsalt (float | None): Altitude in meters.
        ip_address (str | None): Last seen peer address.
        last_alive (datetime | None): Last keep-alive.
        last_report (datetime | None): Last status report.
    """

    model_config = ConfigDict(extra="forbid")

    mac: str
    netid: str = "000000"
    tx_rfch: int = 0
    ant_gain: float | None = None
    desc: str | None = None
    gpspos: tuple[float, float] | None = None
    gpsalt: float | None = None
    ip_address: str | None = None
    last_alive: dt.datetime | None = None
    last_report: dt.datetime | None = None

    @field_validator("mac", "netid", mode="before")
    @classmethod
    def _hex(cls, v: Any) -> str:
        return normalize_hex(v, "mac/netid")

    @field_validator("last_alive", "last_report")
    @classmethod
    def _utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return as_utc(v)


class MulticastGroup(BaseModel):
    """Multicast session; keyed by its group address."""

    model_config = ConfigDict(extra="forbid")

    devaddr: str
    region: str | None = None
    app: str | None = None
    appid: str | None = None
    nwkskey: str | None = None
    appskey: str | None = None
    fcntdown: int = 0

    @field_validator("devaddr", mode="before")
    @classmethod
    def _devaddr(cls, v: Any) -> str:
        return normalize_hex(v, "devaddr")


class Device(BaseModel):
    """
    Over-the-air activation profile.

    Attributes:
        deveui (str): Device EUI (key).
        link (str | None): Device address of the active link once joined
            (secondary index).
    """

    model_config = ConfigDict(extra="forbid")

    deveui: str
    region: str | None = None
    app: str | None = None
    appid: str | None = None
    appeui: str | None = None
    appkey: str | None = None
    desc: str | None = None
    last_join: dt.datetime | None = None
    link: str | None = None

    @field_validator("deveui", mode="before")
    @classmethod
    def _deveui(cls, v: Any) -> str:
        return normalize_hex(v, "deveui")

    @field_validator("link", mode="before")
    @classmethod
    def _link(cls, v: Any) -> str | None:
        return None if v is None else normalize_hex(v, "link")

    @field_validator("last_join")
    @classmethod
    def _utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return as_utc(v)


class Link(BaseModel):
    """
    Active session of one device; the set of link keys is the set of known
    devices for retention.

    Attributes:
        devaddr (str): Device address (key).
        fcntup (int | None): Last uplink frame counter.
        fcntdown (int): Next downlink frame counter.
        last_reset (datetime | None): When the device last restarted (naive
            values are read as UTC). Frames
            received before it are hidden from get_rxframes.
        last_rx (datetime | None): Last uplink reception.
    """

    model_config = ConfigDict(extra="forbid")

    devaddr: str
    region: str | None = None
    app: str | None = None
    appid: str | None = None
    nwkskey: str | None = None
    appskey: str | None = None
    desc: str | None = None
    fcntup: int | None = None
    fcntdown: int = 0
    last_reset: dt.datetime | None = None
    last_rx: dt.datetime | None = None

    @field_validator("devaddr", mode="before")
    @classmethod
    def _devaddr(cls, v: Any) -> str:
        return normalize_hex(v, "devaddr")

    @field_validator("last_reset", "last_rx")
    @classmethod
    def _utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return as_utc(v)


class IgnoredLink(BaseModel):
    """Address/mask pair whose uplinks are dropped without logging."""

    model_config = ConfigDict(extra="forbid")

    devaddr: str
    mask: str = "FFFFFFFF"
    desc: str | None = None


class Pending(BaseModel):
    """Confirmed downlink awaiting acknowledgement."""

    model_config = ConfigDict(extra="forbid")

    devaddr: str
    confirmed: bool = False
    phypayload: str | None = None
    sent_count: int = 0
    receipt: Any = None


# ============================================================================
# Frames
# ============================================================================


class TxFrame(BaseModel):
    """
    Queued downlink.

    Attributes:
        frid (str): Sortable frame id (key); the txframes table is ordered by it.
        datetime (datetime): Enqueue time.
        devaddr (str): Destination device.
        port (int | None): FPort.
        data (str | None): Payload, hex.
        confirmed (bool): Confirmed downlink.
        pending (bool): FPending flag.
    """

    model_config = ConfigDict(extra="forbid")

    frid: str
    datetime: dt.datetime
    devaddr: str
    port: int | None = None
    data: str | None = None
    confirmed: bool = False
    pending: bool = False

    @field_validator("devaddr", mode="before")
    @classmethod
    def _devaddr(cls, v: Any) -> str:
        return normalize_hex(v, "devaddr")

    @field_validator("datetime")
    @classmethod
    def _utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return as_utc(v)


class RxFrame(BaseModel):
    """
    Received uplink, one per (frame, best gateway).

    Attributes:
        frid (int): Monotonic, unique frame id (key); the recency order.
        mac (str): Gateway MAC (secondary index).
        rxq (dict[str, Any] | None): Radio quality (rssi, lsnr, freq, datr, ...).
        average_qs (tuple[float, float] | None): Averaged RSSI/SNR.
        app (str | None): Application the frame was routed to.
        region (str | None): Regional parameter set.
        devaddr (str): Device address (secondary index).
        fcnt (int | None): Uplink frame counter.
        port (int | None): FPort.
        data (str | None): Payload, hex.
        datetime (datetime): Reception time; compared against Link.last_reset.

    Examples:
        >>> from datetime import datetime, UTC
        >>> RxFrame(frid=1, mac="b827ebfffe000001", devaddr="0011aabb",
        ...         datetime=datetime(2026, 1, 1, tzinfo=UTC)).devaddr
        '0011AABB'
    """

    model_config = ConfigDict(extra="forbid")

    frid: int
    mac: str
    rxq: dict[str, Any] | None = None
    average_qs: tuple[float, float] | None = None
    app: str | None = None
    region: str | None = None
    devaddr: str
    fcnt: int | None = None
    port: int | None = None
    data: str | None = None
    datetime: dt.datetime

    @field_validator("mac", "devaddr", mode="before")
    @classmethod
    def _hex(cls, v: Any) -> str:
        return normalize_hex(v, "mac/devaddr")

    @field_validator("datetime")
    @classmethod
    def _utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return as_utc(v)


# ============================================================================
# Integration
# ============================================================================


class Connector(BaseModel):
    """Outbound integration endpoint (MQTT, HTTP, AMQP, ...)."""

    model_config = ConfigDict(extra="forbid")

    connid: str
    app: str | None = None
    format: str | None = None
    uri: str | None = None
    publish_uplinks: str | None = None
    publish_events: str | None = None
    subscribe: str | None = None
    enabled: bool = True
    client_id: str | None = None
    auth: str | None = None
    name: str | None = None
    password: str | None = None


class Handler(BaseModel):
    """Application handler: which frame fields are forwarded and how."""

    model_config = ConfigDict(extra="forbid")

    app: str
    uplink_fields: list[str] = Field(default_factory=list)
    payload: str | None = None
    parse_uplink: str | None = None
    event_fields: list[str] = Field(default_factory=list)
    parse_event: str | None = None
    build: str | None = None
    downlink_expires: str | None = None


# ============================================================================
# Record conversion
# ============================================================================


def to_record(row: BaseModel, tag: str, fields: Sequence[str] | None = None) -> Record:
    """
    Lay out a row model as a Record in ``fields`` order (default: model order).

    Values are dumped in pydantic JSON mode so every value is JSON-safe.
    """
    data = row.model_dump(mode="json")
    return Record.from_mapping(tag, fields or record_fields(type(row)), data)


def from_record(model: type[M], record: Record, fields: Sequence[str]) -> M:
    """
    Parse a Record laid out in ``fields`` order into a row model.

    Raises:
        pydantic.ValidationError: If the record does not satisfy the model
            (including fields the model does not declare).
    """
    return model.model_validate(record.as_dict(fields))
