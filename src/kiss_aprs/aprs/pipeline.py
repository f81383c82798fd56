"""Byte stream to APRS packet pipeline: KISS framer, AX.25 decoder, APRS parser."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from .ax25 import AX25DecodeError, AX25Frame, decode_ax25_frame
from .kiss import BytesLike, KISSFramer
from .packets import APRSPacket
from .parser import decode_aprs

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True, slots=True)
class DecodedPacket:
    port: int
    frame: AX25Frame
    packet: APRSPacket

    def to_tnc2(self) -> str:
        return self.frame.to_tnc2()


PipelineResult = Union[DecodedPacket, AX25DecodeError]
PacketSink = Callable[[PipelineResult], None]


class APRSPipeline:
    """Feed raw transport bytes, get decoded packets back in arrival order.

    Results are returned from :meth:`feed` and, when a sink is supplied, also
    passed to it synchronously before :meth:`feed` returns. A frame that fails
    AX.25 decoding yields its :class:`AX25DecodeError` instead of a packet and
    does not disturb framing of later frames.
    """

    def __init__(self, sink: PacketSink | None = None) -> None:
        self._framer = KISSFramer()
        self._sink = sink
        self.frames_decoded = 0
        self.frames_rejected = 0

    def feed(self, data: BytesLike) -> list[PipelineResult]:
        results: list[PipelineResult] = []
        for kiss_frame in self._framer.feed(data):
            result: PipelineResult
            try:
                frame = decode_ax25_frame(kiss_frame.payload)
            except AX25DecodeError as exc:
                self.frames_rejected += 1
                logger.debug("Discarding KISS frame on port %d: %s", kiss_frame.port, exc)
                result = exc
            else:
                self.frames_decoded += 1
                result = DecodedPacket(
                    port=kiss_frame.port, frame=frame, packet=decode_aprs(frame.info)
                )
            results.append(result)
            if self._sink is not None:
                self._sink(result)
        return results
