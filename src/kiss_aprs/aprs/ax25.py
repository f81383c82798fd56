"""Decoding of AX.25 UI frames carried inside KISS data frames."""

from __future__ import annotations

from dataclasses import dataclass

ADDRESS_LENGTH = 7
MIN_FRAME_LENGTH = 2 * ADDRESS_LENGTH + 2

_EXTENSION_BIT = 0x01
_REPEATED_BIT = 0x20
_FILL_VALUES = (0x00, 0x40)


class AX25DecodeError(ValueError):
    """Raised when a KISS payload cannot be decoded into an AX.25 frame."""


class AX25AddressError(AX25DecodeError):
    """The frame is too short to hold destination and source addresses."""


class AX25ControlFieldError(AX25DecodeError):
    """The address field leaves no room for the control and PID bytes."""


@dataclass(frozen=True, slots=True)
class AX25Address:
    callsign: str
    ssid: int = 0
    has_been_repeated: bool = False

    @classmethod
    def decode(cls, field: bytes) -> AX25Address:
        if len(field) != ADDRESS_LENGTH:
            raise AX25AddressError(
                f"AX.25 address requires {ADDRESS_LENGTH} bytes, got {len(field)}"
            )
        return cls(
            callsign=_decode_callsign(field[:6]),
            ssid=(field[6] >> 1) & 0x0F,
            has_been_repeated=bool(field[6] & _REPEATED_BIT),
        )

    def encode(self) -> bytes:
        """Encode as a terminal (extension bit set) 7-byte address block."""
        callsign = self.callsign.upper().ljust(6)[:6]
        field = bytearray(ord(char) << 1 for char in callsign)
        last = ((self.ssid & 0x0F) << 1) | _EXTENSION_BIT
        if self.has_been_repeated:
            last |= _REPEATED_BIT
        field.append(last)
        return bytes(field)

    def to_tnc2(self, include_asterisk: bool = False) -> str:
        suffix = f"-{self.ssid}" if self.ssid > 0 else ""
        indicator = "*" if include_asterisk and self.has_been_repeated else ""
        return f"{self.callsign}{suffix}{indicator}"

    def __str__(self) -> str:
        return self.to_tnc2()


@dataclass(frozen=True, slots=True)
class AX25Frame:
    destination: AX25Address
    source: AX25Address
    digipeaters: tuple[AX25Address, ...]
    control: int
    pid: int
    info: bytes

    def to_tnc2(self) -> str:
        """Render the frame as a TNC2 monitor line.

        The info field is cut at the first CR or LF and decoded as Latin-1 so
        binary payloads survive the round trip to text.
        """
        path = "".join(f",{digi.to_tnc2()}" for digi in self.digipeaters)
        info = self.info
        for sep in (b"\r", b"\n"):
            idx = info.find(sep)
            if idx >= 0:
                info = info[:idx]
                break
        header = f"{self.source.to_tnc2()}>{self.destination.to_tnc2()}{path}:"
        return header + info.decode("latin-1")


def decode_ax25_frame(payload: bytes) -> AX25Frame:
    """Parse a KISS data payload into addressing, control, PID and info."""
    payload = bytes(payload)
    if len(payload) < MIN_FRAME_LENGTH:
        raise AX25AddressError(
            f"AX.25 frame too short for addresses ({len(payload)} bytes)"
        )

    destination = AX25Address.decode(payload[0:7])
    source = AX25Address.decode(payload[7:14])
    offset = 2 * ADDRESS_LENGTH

    digipeaters: list[AX25Address] = []
    while not payload[offset - 1] & _EXTENSION_BIT:
        if offset + ADDRESS_LENGTH > len(payload):
            break
        digipeaters.append(AX25Address.decode(payload[offset : offset + 7]))
        offset += ADDRESS_LENGTH

    if offset + 2 > len(payload):
        raise AX25ControlFieldError("AX.25 frame missing control/PID fields")

    return AX25Frame(
        destination=destination,
        source=source,
        digipeaters=tuple(digipeaters),
        control=payload[offset],
        pid=payload[offset + 1],
        info=payload[offset + 2 :],
    )


def _decode_callsign(raw: bytes) -> str:
    chars = []
    for byte in raw:
        value = (byte >> 1) & 0x7F
        chars.append(" " if value in _FILL_VALUES else chr(value))
    return "".join(chars).strip().upper()
