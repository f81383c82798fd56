"""Offline command: replay a captured KISS byte stream through the decoder."""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from kiss_aprs import config as config_module
from kiss_aprs.aprs.pipeline import APRSPipeline, PipelineResult

from .output import format_result, should_emit

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def run_decode(args: Namespace) -> int:
    overrides: dict[str, Any] = {}
    if getattr(args, "json", False):
        overrides["output"] = {"format": "json"}
    try:
        settings = config_module.load_config(
            getattr(args, "config", None), cli_overrides=overrides
        )
    except ValueError as exc:
        logger.error("Config invalid: %s", exc)
        return 1

    try:
        raw = _read_input(getattr(args, "input", "-") or "-")
    except OSError as exc:
        logger.error("Unable to read capture: %s", exc)
        return 1

    if getattr(args, "hex", False):
        try:
            raw = bytes.fromhex(raw.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.error("Capture is not valid hex: %s", exc)
            return 1

    def _emit(result: PipelineResult) -> None:
        if should_emit(result, settings):
            print(format_result(result, settings.output_format))

    pipeline = APRSPipeline(sink=_emit)
    pipeline.feed(raw)
    logger.info(
        "Frames decoded: %d, rejected: %d",
        pipeline.frames_decoded,
        pipeline.frames_rejected,
    )
    return 0


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).expanduser().read_bytes()
