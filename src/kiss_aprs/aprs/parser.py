"""Classification and parsing of APRS information fields.

:func:`decode_aprs` never raises: a payload that is not ASCII, carries an
unrecognised type indicator, or does not match its variant grammar comes back
as :class:`~kiss_aprs.aprs.packets.Unknown` with the raw text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from . import base91
from .packets import (
    APRSPacket,
    APRSPacketType,
    APRSTimestamp,
    Item,
    Message,
    ObjectReport,
    PositionNoTimestamp,
    PositionWithTimestamp,
    Query,
    Status,
    Telemetry,
    Unknown,
    Weather,
    WEATHER_FIELDS,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

TYPE_INDICATORS: dict[str, APRSPacketType] = {
    "!": APRSPacketType.POSITION_NO_TIMESTAMP,
    "@": APRSPacketType.POSITION_WITH_TIMESTAMP,
    "=": APRSPacketType.POSITION_WITH_TIMESTAMP,
    ":": APRSPacketType.MESSAGE,
    "_": APRSPacketType.WEATHER,
    "T": APRSPacketType.TELEMETRY,
    ";": APRSPacketType.OBJECT,
    ")": APRSPacketType.ITEM,
    "?": APRSPacketType.QUERY,
    ">": APRSPacketType.STATUS,
}

_UNCOMPRESSED_RE = re.compile(
    r"^(\d{4}\.\d{2})([NS])(.)(\d{5}\.\d{2})([EW])(.)(.*)$", re.DOTALL
)
_TIMESTAMP_RE = re.compile(r"^(\d{6})([z/\\])")

# Compressed block: symbol table at 0, latitude group 0-4, longitude group
# 5-9, symbol code at 12.
_COMPRESSED_LENGTH = 13
_COMPRESSED_LAT = slice(0, 5)
_COMPRESSED_LON = slice(5, 10)
_COMPRESSED_SYMBOL = 12

_WEATHER_PATTERNS = {
    marker: re.compile(re.escape(marker) + (r"(-?\d+)" if marker == "t" else r"(\d+)"))
    for marker, _name, _width in WEATHER_FIELDS
}
_WEATHER_FLOAT_FIELDS = frozenset(
    {"rainfall_last_hour", "rainfall_last_24h", "rainfall_since_midnight", "pressure"}
)


def classify(info: str) -> APRSPacketType:
    """Return the packet type selected by the leading type indicator."""
    if not info:
        return APRSPacketType.UNKNOWN
    return TYPE_INDICATORS.get(info[0], APRSPacketType.UNKNOWN)


def decode_aprs(info: bytes | str) -> APRSPacket:
    """Classify an AX.25 information field and parse it into a packet variant."""
    if isinstance(info, (bytes, bytearray, memoryview)):
        raw = bytes(info)
        try:
            text = raw.decode("ascii")
        except UnicodeDecodeError:
            logger.debug("Info field is not ASCII; reporting as unknown")
            return Unknown(raw=raw.decode("latin-1"))
    else:
        text = info

    packet_type = classify(text)
    if packet_type is APRSPacketType.UNKNOWN:
        return Unknown(raw=text)

    parser = _PARSERS[packet_type]
    packet = parser(text[0], text[1:])
    if packet is None:
        logger.debug("%s grammar did not match: %r", packet_type.value, text)
        return Unknown(raw=text)
    return packet


def parse_position(indicator: str, body: str) -> PositionNoTimestamp | None:
    fields = _parse_position_fields(body)
    if fields is None:
        return None
    return PositionNoTimestamp(**fields)


def parse_timestamped_position(
    indicator: str, body: str
) -> PositionWithTimestamp | None:
    messaging = indicator == "="
    timestamp: APRSTimestamp | None = None

    match = _TIMESTAMP_RE.match(body)
    if match is not None:
        try:
            timestamp = APRSTimestamp(mode=match.group(2), digits=match.group(1))
        except ValueError as exc:
            logger.debug("Rejecting position timestamp: %s", exc)
            return None
        body = body[match.end() :]
    elif not messaging:
        return None

    fields = _parse_position_fields(body)
    if fields is None:
        return None
    if fields["compressed_data"] is not None and timestamp is not None:
        if timestamp.mode != "z":
            return None
    return PositionWithTimestamp(timestamp=timestamp, messaging=messaging, **fields)


def _parse_position_fields(body: str) -> dict[str, object] | None:
    match = _UNCOMPRESSED_RE.match(body)
    if match is not None:
        lat_text, lat_hemi, table, lon_text, lon_hemi, code, comment = match.groups()
        latitude = float(lat_text)
        longitude = float(lon_text)
        if lat_hemi == "S":
            latitude = -latitude
        if lon_hemi == "W":
            longitude = -longitude
        return {
            "latitude": latitude,
            "longitude": longitude,
            "symbol_table": table,
            "symbol_code": code,
            "comment": comment,
            "compressed_data": None,
        }
    return _parse_compressed_fields(body)


def _parse_compressed_fields(body: str) -> dict[str, object] | None:
    if len(body) < _COMPRESSED_LENGTH:
        return None
    block = body[:_COMPRESSED_LENGTH]
    try:
        latitude = base91.decode(block[_COMPRESSED_LAT])
        longitude = base91.decode(block[_COMPRESSED_LON])
    except ValueError as exc:
        logger.debug("Rejecting compressed position: %s", exc)
        return None
    return {
        "latitude": latitude,
        "longitude": longitude,
        "symbol_table": block[0],
        "symbol_code": block[_COMPRESSED_SYMBOL],
        "comment": body[_COMPRESSED_LENGTH:],
        "compressed_data": block,
    }


def parse_message(indicator: str, body: str) -> Message | None:
    parts = body.split(":", 1)
    if len(parts) < 2:
        return None
    addressee, text = parts
    return Message(addressee=addressee.strip(), text=text, addressee_field=addressee)


def parse_weather(indicator: str, body: str) -> Weather:
    digits = len(body) - len(body.lstrip("0123456789"))
    stamp, remainder = body[:digits], body[digits:]

    values: dict[str, object] = {}
    consumed: list[tuple[int, int]] = []
    for marker, name, _width in WEATHER_FIELDS:
        found = _WEATHER_PATTERNS[marker].search(remainder)
        if found is None:
            continue
        number = int(found.group(1))
        values[name] = float(number) if name in _WEATHER_FLOAT_FIELDS else number
        consumed.append(found.span())

    extra: list[str] = []
    position = 0
    for start, end in sorted(consumed):
        extra.append(remainder[position:start])
        position = end
    extra.append(remainder[position:])
    return Weather(timestamp=stamp or None, extra="".join(extra), **values)


def parse_telemetry(indicator: str, body: str) -> Telemetry | None:
    fields = body.split("#")[-1].split(",")
    if not fields:
        return None

    try:
        sequence = int(fields[0])
    except ValueError:
        sequence = 0

    analog: list[float] = []
    analog_text: list[str] = []
    for raw in fields[1:-1]:
        try:
            analog.append(float(raw))
        except ValueError:
            continue
        analog_text.append(raw)

    digital: tuple[bool, ...] = ()
    if len(fields) > 1:
        digital = tuple(char == "1" for char in fields[-1][:8])

    return Telemetry(
        sequence_number=sequence,
        analog_values=tuple(analog),
        analog_text=tuple(analog_text),
        digital_values=digital,
    )


def parse_object(indicator: str, body: str) -> ObjectReport:
    return ObjectReport(content=body)


def parse_item(indicator: str, body: str) -> Item:
    return Item(content=body)


def parse_query(indicator: str, body: str) -> Query:
    return Query(content=body)


def parse_status(indicator: str, body: str) -> Status:
    return Status(content=body)


_PARSERS: dict[APRSPacketType, Callable[[str, str], APRSPacket | None]] = {
    APRSPacketType.POSITION_NO_TIMESTAMP: parse_position,
    APRSPacketType.POSITION_WITH_TIMESTAMP: parse_timestamped_position,
    APRSPacketType.MESSAGE: parse_message,
    APRSPacketType.WEATHER: parse_weather,
    APRSPacketType.TELEMETRY: parse_telemetry,
    APRSPacketType.OBJECT: parse_object,
    APRSPacketType.ITEM: parse_item,
    APRSPacketType.QUERY: parse_query,
    APRSPacketType.STATUS: parse_status,
}
