"""KISS / AX.25 / APRS decode stack.

Provides the KISS framer, AX.25 frame decoding, the APRS payload parser,
the base-91 coordinate codec and the pipeline that chains them.
"""

from .ax25 import (  # noqa: F401
    AX25Address,
    AX25AddressError,
    AX25ControlFieldError,
    AX25DecodeError,
    AX25Frame,
    decode_ax25_frame,
)
from .kiss import KISSCommand, KISSFrame, KISSFramer, encode_kiss_frame  # noqa: F401
from .packets import APRSPacket, APRSPacketType  # noqa: F401
from .parser import decode_aprs  # noqa: F401
from .pipeline import APRSPipeline, DecodedPacket  # noqa: F401

__all__ = [
    "AX25Address",
    "AX25AddressError",
    "AX25ControlFieldError",
    "AX25DecodeError",
    "AX25Frame",
    "decode_ax25_frame",
    "KISSCommand",
    "KISSFrame",
    "KISSFramer",
    "encode_kiss_frame",
    "APRSPacket",
    "APRSPacketType",
    "decode_aprs",
    "APRSPipeline",
    "DecodedPacket",
]
