"""Typed APRS packet variants.

Every variant is an independent frozen dataclass; :data:`APRSPacket` is the
closed union of them. ``description`` renders a packet back to the info-field
text it was parsed from.

Uncompressed positions keep latitude/longitude as the packed ``DDMM.mm`` /
``DDDMM.mm`` numbers printed on the wire, while compressed positions carry
decimal degrees produced by :mod:`kiss_aprs.aprs.base91`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import time, timezone
from enum import Enum
from typing import ClassVar, Union


class APRSPacketType(Enum):
    POSITION_NO_TIMESTAMP = "Position (no timestamp)"
    POSITION_WITH_TIMESTAMP = "Position (with timestamp)"
    MESSAGE = "Message"
    WEATHER = "Weather Report"
    TELEMETRY = "Telemetry"
    OBJECT = "Object"
    ITEM = "Item"
    QUERY = "Query"
    STATUS = "Status"
    UNKNOWN = "Unknown"


TIMESTAMP_MODES = ("z", "/", "\\")


@dataclass(frozen=True, slots=True)
class APRSTimestamp:
    """Six-digit timestamp field plus its mode character.

    ``z`` and ``/`` carry HHMMSS (UTC and local time respectively); ``\\``
    carries day, hour and minute.
    """

    mode: str
    digits: str

    def __post_init__(self) -> None:
        if self.mode not in TIMESTAMP_MODES:
            raise ValueError(f"Unsupported timestamp mode: {self.mode!r}")
        if len(self.digits) != 6 or not self.digits.isdigit():
            raise ValueError(f"Timestamp must be six digits: {self.digits!r}")
        # Validates field ranges.
        _ = self.time
        if self.day is not None and not 1 <= self.day <= 31:
            raise ValueError(f"Timestamp day out of range: {self.day}")

    @property
    def time(self) -> time:
        first, second, third = (int(self.digits[i : i + 2]) for i in (0, 2, 4))
        if self.mode == "z":
            return time(first, second, third, tzinfo=timezone.utc)
        if self.mode == "/":
            return time(first, second, third)
        return time(second, third)

    @property
    def day(self) -> int | None:
        if self.mode == "\\":
            return int(self.digits[:2])
        return None

    def __str__(self) -> str:
        return f"{self.digits}{self.mode}"


def _format_packed(value: float, width: int, positive: str, negative: str) -> str:
    hemisphere = negative if math.copysign(1.0, value) < 0 else positive
    return f"{abs(value):0{width}.2f}{hemisphere}"


@dataclass(frozen=True, slots=True)
class PositionNoTimestamp:
    latitude: float
    longitude: float
    symbol_table: str
    symbol_code: str
    comment: str = ""
    compressed_data: str | None = None

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.POSITION_NO_TIMESTAMP

    @property
    def compressed(self) -> bool:
        return self.compressed_data is not None

    @property
    def description(self) -> str:
        return "!" + _position_body(self)


@dataclass(frozen=True, slots=True)
class PositionWithTimestamp:
    timestamp: APRSTimestamp | None
    latitude: float
    longitude: float
    symbol_table: str
    symbol_code: str
    comment: str = ""
    messaging: bool = False
    compressed_data: str | None = None

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.POSITION_WITH_TIMESTAMP

    @property
    def compressed(self) -> bool:
        return self.compressed_data is not None

    @property
    def description(self) -> str:
        indicator = "=" if self.messaging else "@"
        stamp = str(self.timestamp) if self.timestamp is not None else ""
        return indicator + stamp + _position_body(self)


def _position_body(packet: PositionNoTimestamp | PositionWithTimestamp) -> str:
    if packet.compressed_data is not None:
        return packet.compressed_data + packet.comment
    return (
        _format_packed(packet.latitude, 7, "N", "S")
        + packet.symbol_table
        + _format_packed(packet.longitude, 8, "E", "W")
        + packet.symbol_code
        + packet.comment
    )


@dataclass(frozen=True, slots=True)
class Message:
    addressee: str
    text: str
    # Addressee field as received, padding included.
    addressee_field: str | None = field(default=None, compare=False, repr=False)

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.MESSAGE

    @property
    def is_bulletin(self) -> bool:
        return self.addressee.upper().startswith("BLN")

    @property
    def ack_id(self) -> str | None:
        """Message number following a trailing ``{``, if any."""
        _, sep, tail = self.text.rpartition("{")
        if not sep or not tail:
            return None
        return tail

    @property
    def description(self) -> str:
        addressee = self.addressee_field
        if addressee is None:
            addressee = f"{self.addressee:<9}"
        return f":{addressee}:{self.text}"


# Marker letter, attribute name, rendered width.
WEATHER_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("c", "wind_direction", 3),
    ("s", "wind_speed", 3),
    ("g", "wind_gust", 3),
    ("t", "temperature_f", 3),
    ("r", "rainfall_last_hour", 3),
    ("p", "rainfall_last_24h", 3),
    ("P", "rainfall_since_midnight", 3),
    ("h", "humidity", 2),
    ("b", "pressure", 5),
)


@dataclass(frozen=True, slots=True)
class Weather:
    timestamp: str | None = None
    wind_direction: int | None = None
    wind_speed: int | None = None
    wind_gust: int | None = None
    temperature_f: int | None = None
    rainfall_last_hour: float | None = None
    rainfall_last_24h: float | None = None
    rainfall_since_midnight: float | None = None
    humidity: int | None = None
    pressure: float | None = None
    # Unparsed remainder, e.g. unsupported markers and the software type.
    extra: str = ""

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.WEATHER

    @property
    def description(self) -> str:
        parts = ["_", self.timestamp or ""]
        for marker, name, width in WEATHER_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            parts.append(f"{marker}{int(round(value)):0{width}d}")
        parts.append(self.extra)
        return "".join(parts)


@dataclass(frozen=True, slots=True)
class Telemetry:
    sequence_number: int
    analog_values: tuple[float, ...] = ()
    digital_values: tuple[bool, ...] = ()
    # Analog fields as received, so zero padding survives rendering.
    analog_text: tuple[str, ...] = field(default=(), compare=False, repr=False)

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.TELEMETRY

    @property
    def description(self) -> str:
        fields = [f"{self.sequence_number:03d}"]
        if len(self.analog_text) == len(self.analog_values):
            fields.extend(self.analog_text)
        else:
            fields.extend(_format_analog(value) for value in self.analog_values)
        if self.digital_values:
            fields.append("".join("1" if bit else "0" for bit in self.digital_values))
        return "T#" + ",".join(fields)


def _format_analog(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


# Object, item, query and status reports are classified only; ``content`` is
# the info field after the type indicator.


@dataclass(frozen=True, slots=True)
class ObjectReport:
    content: str

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.OBJECT

    @property
    def description(self) -> str:
        return ";" + self.content


@dataclass(frozen=True, slots=True)
class Item:
    content: str

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.ITEM

    @property
    def description(self) -> str:
        return ")" + self.content


@dataclass(frozen=True, slots=True)
class Query:
    content: str

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.QUERY

    @property
    def description(self) -> str:
        return "?" + self.content


@dataclass(frozen=True, slots=True)
class Status:
    content: str

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.STATUS

    @property
    def description(self) -> str:
        return ">" + self.content


@dataclass(frozen=True, slots=True)
class Unknown:
    raw: str

    packet_type: ClassVar[APRSPacketType] = APRSPacketType.UNKNOWN

    @property
    def description(self) -> str:
        return self.raw


APRSPacket = Union[
    PositionNoTimestamp,
    PositionWithTimestamp,
    Message,
    Weather,
    Telemetry,
    ObjectReport,
    Item,
    Query,
    Status,
    Unknown,
]
