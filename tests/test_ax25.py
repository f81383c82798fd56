"""Tests for AX.25 frame decoding and TNC2 rendering."""

from __future__ import annotations

import pytest

from kiss_aprs.aprs.ax25 import (
    AX25Address,
    AX25AddressError,
    AX25ControlFieldError,
    AX25DecodeError,
    decode_ax25_frame,
)


def _encode_address(
    callsign: str, ssid: int = 0, *, last: bool, repeated: bool = False
) -> bytes:
    callsign = callsign.ljust(6)[:6].upper()
    field = bytearray()
    for char in callsign:
        field.append(ord(char) << 1)
    byte = (ssid & 0x0F) << 1
    if repeated:
        byte |= 0x20
    if last:
        byte |= 0x01
    field.append(byte)
    return bytes(field)


# W2VER-15 via four digipeaters, as received off air.
REAL_PACKET = bytes(
    [
        0x82, 0xA0, 0x9C, 0x66, 0x70, 0x66, 0x60,
        0xAE, 0x64, 0xAC, 0x8A, 0xA4, 0x40, 0x7E,
        0x96, 0x86, 0x64, 0x9E, 0xAA, 0xA4, 0xE6,
        0xAE, 0x84, 0x64, 0xB4, 0x92, 0x92, 0xE0,
        0x96, 0x86, 0x64, 0x9A, 0x88, 0x9C, 0xE4,
        0xAE, 0x92, 0x88, 0x8A, 0x64, 0x40, 0xE1,
        0x03, 0xF0,
    ]
) + b"!4110.00NS07430.10W#PHG4520 W3,SSn-N VRACES Vernon,NJ\r"


def test_decode_minimal_frame() -> None:
    payload = bytes(
        [
            0x9C, 0x94, 0x6E, 0xA0, 0x40, 0x40, 0xE0,
            0x9C, 0x6E, 0x98, 0x8A, 0x9A, 0x40, 0x61,
            0x3E, 0xF0, 0x00,
        ]
    )

    frame = decode_ax25_frame(payload)

    assert frame.destination.callsign == "NJ7P"
    assert frame.destination.ssid == 0
    assert frame.source.callsign == "N7LEM"
    assert frame.source.ssid == 0
    assert frame.digipeaters == ()
    assert frame.control == 0x3E
    assert frame.pid == 0xF0
    assert frame.info == b"\x00"


def test_decode_ui_frame_with_text_info() -> None:
    payload = bytes(
        [
            0x9C, 0x94, 0x6E, 0xA0, 0x40, 0x40, 0xE0,
            0x9C, 0x6E, 0x98, 0x8A, 0x9A, 0x40, 0x61,
            0x03, 0xF0,
        ]
    ) + b"The quick brown fox jumps over the lazy dog"

    frame = decode_ax25_frame(payload)

    assert frame.destination.callsign == "NJ7P"
    assert frame.source.callsign == "N7LEM"
    assert frame.digipeaters == ()
    assert frame.control == 0x03
    assert frame.pid == 0xF0
    assert frame.info == b"The quick brown fox jumps over the lazy dog"
    assert frame.to_tnc2() == "N7LEM>NJ7P:The quick brown fox jumps over the lazy dog"


def test_decode_real_packet_with_digipeaters() -> None:
    frame = decode_ax25_frame(REAL_PACKET)

    assert frame.destination.callsign == "APN383"
    assert frame.destination.ssid == 0
    assert frame.source.callsign == "W2VER"
    assert frame.source.ssid == 15
    assert [str(digi) for digi in frame.digipeaters] == [
        "KC2OUR-3",
        "WB2ZII",
        "KC2MDN-2",
        "WIDE2",
    ]
    assert frame.control == 0x03
    assert frame.pid == 0xF0
    assert frame.info.startswith(b"!4110.00NS07430.10W#PHG4520")
    assert frame.to_tnc2() == (
        "W2VER-15>APN383,KC2OUR-3,WB2ZII,KC2MDN-2,WIDE2:"
        "!4110.00NS07430.10W#PHG4520 W3,SSn-N VRACES Vernon,NJ"
    )


def test_to_tnc2_basic() -> None:
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", ssid=10, last=False)
        + _encode_address("WIDE1", ssid=1, last=False)
        + _encode_address("WIDE2", ssid=2, last=True, repeated=True)
        + bytes([0x03, 0xF0])
        + b"Hello APRS"
    )

    frame = decode_ax25_frame(payload)

    assert frame.to_tnc2() == "N0CALL-10>APRS,WIDE1-1,WIDE2-2:Hello APRS"
    assert frame.digipeaters[1].has_been_repeated
    assert frame.digipeaters[1].to_tnc2(include_asterisk=True) == "WIDE2-2*"


def test_to_tnc2_preserves_binary_info() -> None:
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", last=True)
        + bytes([0x03, 0xF0])
        + b"Binary\xff\xfe\xfddata"
    )

    result = decode_ax25_frame(payload).to_tnc2()

    assert result == "N0CALL>APRS:Binary\xff\xfe\xfddata"
    assert result.encode("latin-1").endswith(b"\xff\xfe\xfddata")


@pytest.mark.parametrize("separator", [b"\r", b"\n", b"\r\n"])
def test_to_tnc2_truncates_at_line_break(separator: bytes) -> None:
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", last=True)
        + bytes([0x03, 0xF0])
        + b"First line"
        + separator
        + b"Second line"
    )

    frame = decode_ax25_frame(payload)

    assert frame.to_tnc2() == "N0CALL>APRS:First line"
    assert frame.info.endswith(b"Second line")


def test_short_frame_raises_address_error() -> None:
    payload = _encode_address("APRS", last=False) + _encode_address("N0CALL", last=True)

    with pytest.raises(AX25AddressError):
        decode_ax25_frame(payload + b"\x03")


def test_missing_control_after_digipeater_raises() -> None:
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", last=False)
        + _encode_address("WIDE1", ssid=1, last=True)
        + b"\x03"
    )

    with pytest.raises(AX25ControlFieldError):
        decode_ax25_frame(payload)


def test_decode_errors_share_base_class() -> None:
    assert issubclass(AX25AddressError, AX25DecodeError)
    assert issubclass(AX25ControlFieldError, AX25DecodeError)
    assert issubclass(AX25DecodeError, ValueError)


def test_truncated_digipeater_chain_stops_early() -> None:
    # Source claims more addresses follow, but only five bytes remain.
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", last=False)
        + bytes([0x03, 0xF0])
        + b"abc"
    )

    frame = decode_ax25_frame(payload)

    assert frame.digipeaters == ()
    assert frame.control == 0x03
    assert frame.pid == 0xF0
    assert frame.info == b"abc"


def test_empty_info_field_allowed() -> None:
    payload = (
        _encode_address("APRS", last=False)
        + _encode_address("N0CALL", last=True)
        + bytes([0x03, 0xF0])
    )

    frame = decode_ax25_frame(payload)

    assert frame.info == b""
    assert frame.to_tnc2() == "N0CALL>APRS:"


@pytest.mark.parametrize("callsign", ["N0CALL", "K1A", "WIDE2", "AB1CDE"])
@pytest.mark.parametrize("ssid", [0, 1, 9, 15])
@pytest.mark.parametrize("repeated", [False, True])
def test_address_roundtrip(callsign: str, ssid: int, repeated: bool) -> None:
    address = AX25Address(callsign, ssid, repeated)

    assert AX25Address.decode(address.encode()) == address


def test_address_encode_layout() -> None:
    encoded = AX25Address("n0call", 10).encode()

    assert encoded[:6] == bytes(ord(char) << 1 for char in "N0CALL")
    assert encoded[6] == (10 << 1) | 0x01


def test_address_decode_treats_0x40_as_fill() -> None:
    field = bytes([ord("K") << 1, ord("1") << 1, ord("A") << 1, 0x80, 0x80, 0x00, 0x00])

    assert AX25Address.decode(field).callsign == "K1A"


def test_address_decode_uppercases() -> None:
    field = bytes(ord(char) << 1 for char in "n0call") + b"\x00"

    assert AX25Address.decode(field).callsign == "N0CALL"


def test_address_decode_requires_seven_bytes() -> None:
    with pytest.raises(AX25AddressError):
        AX25Address.decode(b"\x00" * 6)
