"""Rendering of pipeline results for terminal and JSON output."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

from kiss_aprs.aprs.ax25 import AX25DecodeError
from kiss_aprs.aprs.packets import (
    APRSPacket,
    Message,
    PositionNoTimestamp,
    PositionWithTimestamp,
    Telemetry,
    Unknown,
    Weather,
)
from kiss_aprs.aprs.pipeline import DecodedPacket, PipelineResult
from kiss_aprs.config import DecoderConfig
from kiss_aprs.timeutils import utc_timestamp


def should_emit(result: PipelineResult, config: DecoderConfig) -> bool:
    if isinstance(result, AX25DecodeError):
        return config.show_errors
    if isinstance(result.packet, Unknown):
        return config.show_unknown
    return True


def format_result(result: PipelineResult, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(result_to_dict(result), sort_keys=True)
    if isinstance(result, AX25DecodeError):
        return f"{utc_timestamp()} frame error: {result}"
    return (
        f"{utc_timestamp()} port={result.port} {result.to_tnc2()}\n"
        f"    {result.packet.packet_type.value}: {summarize_packet(result.packet)}"
    )


def result_to_dict(result: PipelineResult) -> dict[str, Any]:
    if isinstance(result, AX25DecodeError):
        return {"error": type(result).__name__, "detail": str(result)}
    return _decoded_to_dict(result)


def _decoded_to_dict(decoded: DecodedPacket) -> dict[str, Any]:
    frame = decoded.frame
    fields = asdict(decoded.packet)
    return {
        "port": decoded.port,
        "source": frame.source.to_tnc2(),
        "destination": frame.destination.to_tnc2(),
        "path": [digi.to_tnc2() for digi in frame.digipeaters],
        "type": decoded.packet.packet_type.value,
        "fields": fields,
        "info": decoded.packet.description,
    }


def summarize_packet(packet: APRSPacket) -> str:
    """One-line human summary of a packet's decoded fields."""
    match packet:
        case PositionWithTimestamp(timestamp=stamp) if stamp is not None:
            return f"{_position_summary(packet)} at {stamp.time.isoformat()}"
        case PositionNoTimestamp() | PositionWithTimestamp():
            return _position_summary(packet)
        case Message(addressee=addressee, text=text):
            kind = "bulletin" if packet.is_bulletin else "to"
            return f"{kind} {addressee}: {text}"
        case Weather():
            return _weather_summary(packet)
        case Telemetry(sequence_number=seq, analog_values=analog, digital_values=bits):
            analog_text = ", ".join(f"{value:g}" for value in analog)
            bit_text = "".join("1" if bit else "0" for bit in bits)
            return f"#{seq} analog=[{analog_text}] digital={bit_text or '-'}"
        case Unknown(raw=raw):
            return repr(raw)
        case _:
            return packet.description


def _position_summary(packet: PositionNoTimestamp | PositionWithTimestamp) -> str:
    if packet.compressed:
        coords = f"{packet.latitude:.5f}, {packet.longitude:.5f}"
    else:
        coords = f"{packet.latitude:.2f}, {packet.longitude:.2f}"
    text = f"{coords} symbol={packet.symbol_table}{packet.symbol_code}"
    if packet.comment:
        text += f" {packet.comment.strip()}"
    return text


def _weather_summary(packet: Weather) -> str:
    parts: list[str] = []
    if packet.wind_direction is not None:
        parts.append(f"wind {packet.wind_direction}°")
    if packet.wind_speed is not None:
        parts.append(f"{packet.wind_speed} mph")
    if packet.wind_gust is not None:
        parts.append(f"gust {packet.wind_gust} mph")
    if packet.temperature_f is not None:
        parts.append(f"{packet.temperature_f}°F")
    if packet.humidity is not None:
        parts.append(f"{packet.humidity}% RH")
    if packet.pressure is not None:
        parts.append(f"{packet.pressure / 10:.1f} hPa")
    return ", ".join(parts) or "no readings"
