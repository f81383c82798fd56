"""KISS byte-stream framing.

The framer keeps its accumulation buffer and escape flag between calls, so
byte chunks may arrive split at any position. It is not reentrant: a single
reader must serialize its calls to :meth:`KISSFramer.feed`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

BytesLike = bytes | bytearray | memoryview

FEND = 0xC0
FESC = 0xDB
TFEND = 0xDC
TFESC = 0xDD

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class KISSCommand(IntEnum):
    DATA = 0x00
    TX_DELAY = 0x01
    PERSISTENCE = 0x02
    SLOT_TIME = 0x03
    TX_TAIL = 0x04
    FULL_DUPLEX = 0x05
    SET_HARDWARE = 0x06
    RETURN = 0x0F


@dataclass(frozen=True, slots=True)
class KISSFrame:
    port: int
    command: KISSCommand
    payload: bytes


class KISSFramer:
    """Recover KISS data frames from an escaped byte stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._escaping = False

    @property
    def pending(self) -> int:
        """Number of bytes accumulated for the frame in progress."""
        return len(self._buffer)

    def feed(self, data: BytesLike) -> list[KISSFrame]:
        frames: list[KISSFrame] = []
        for value in bytes(data):
            if self._escaping:
                if value == TFEND:
                    self._buffer.append(FEND)
                elif value == TFESC:
                    self._buffer.append(FESC)
                else:
                    logger.debug("Dropping invalid KISS escape byte %#04x", value)
                self._escaping = False
            elif value == FESC:
                self._escaping = True
            elif value == FEND:
                frame = self._complete_frame()
                if frame is not None:
                    frames.append(frame)
            else:
                self._buffer.append(value)
        return frames

    def _complete_frame(self) -> KISSFrame | None:
        raw = bytes(self._buffer)
        self._buffer.clear()
        if len(raw) <= 1:
            return None
        header = raw[0]
        command = header & 0x0F
        port = (header & 0xF0) >> 4
        if command != KISSCommand.DATA:
            logger.debug("Ignoring KISS command %#x on port %d", command, port)
            return None
        return KISSFrame(port=port, command=KISSCommand.DATA, payload=raw[1:])


def kiss_escape(payload: BytesLike) -> bytes:
    """Escape a payload per the KISS protocol rules."""
    escaped = bytearray()
    for value in bytes(payload):
        if value == FEND:
            escaped.extend((FESC, TFEND))
        elif value == FESC:
            escaped.extend((FESC, TFESC))
        else:
            escaped.append(value)
    return bytes(escaped)


def kiss_unescape(payload: BytesLike) -> bytes:
    """Reverse KISS escape sequences; invalid escapes drop the offending byte."""
    decoded = bytearray()
    iterator = iter(bytes(payload))
    for value in iterator:
        if value != FESC:
            decoded.append(value)
            continue
        nxt = next(iterator, None)
        if nxt == TFEND:
            decoded.append(FEND)
        elif nxt == TFESC:
            decoded.append(FESC)
    return bytes(decoded)


def encode_kiss_frame(
    payload: BytesLike,
    *,
    port: int = 0,
    command: KISSCommand | int = KISSCommand.DATA,
) -> bytes:
    """Wrap ``payload`` in a FEND-delimited KISS frame."""
    if not 0 <= port <= 0x0F:
        raise ValueError("KISS port number must be between 0 and 15 inclusive")
    command_value = int(KISSCommand(command))
    frame = bytearray()
    frame.append(FEND)
    frame.extend(kiss_escape(bytes([(port << 4) | (command_value & 0x0F)])))
    frame.extend(kiss_escape(payload))
    frame.append(FEND)
    return bytes(frame)
