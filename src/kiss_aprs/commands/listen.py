"""Runtime command: decode live traffic from a KISS TCP server."""

from __future__ import annotations

import logging
import time
from argparse import Namespace
from typing import Any

from kiss_aprs import config as config_module
from kiss_aprs.aprs.kiss_client import KISSClient, KISSClientConfig, KISSClientError
from kiss_aprs.aprs.pipeline import APRSPipeline, DecodedPacket, PipelineResult

from .output import format_result, should_emit

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_CONNECT_ATTEMPTS = 5


def run_listen(args: Namespace) -> int:
    """Connect to the KISS server and print decoded packets until interrupted."""
    try:
        settings = config_module.load_config(
            getattr(args, "config", None), cli_overrides=_cli_overrides(args)
        )
    except ValueError as exc:
        logger.error("Config invalid: %s", exc)
        return 1

    client = KISSClient(
        KISSClientConfig(
            host=settings.kiss_host,
            port=settings.kiss_port,
            timeout=settings.kiss_timeout,
        )
    )
    if not _wait_for_kiss(client, attempts=_CONNECT_ATTEMPTS):
        logger.error(
            "Unable to reach KISS server at %s:%s", settings.kiss_host, settings.kiss_port
        )
        return 1

    logger.info(
        "Listening on KISS %s:%s", settings.kiss_host, settings.kiss_port
    )

    once = bool(getattr(args, "once", False))
    decoded_count = 0

    def _emit(result: PipelineResult) -> None:
        nonlocal decoded_count
        if isinstance(result, DecodedPacket):
            decoded_count += 1
        if should_emit(result, settings):
            print(format_result(result, settings.output_format), flush=True)

    pipeline = APRSPipeline(sink=_emit)
    try:
        while True:
            try:
                chunk = client.read_chunk()
            except TimeoutError:
                continue
            pipeline.feed(chunk)
            if once and decoded_count:
                break
    except KISSClientError as exc:
        logger.error("KISS connection lost: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopping listener")
    finally:
        client.close()
        logger.info(
            "Frames decoded: %d, rejected: %d",
            pipeline.frames_decoded,
            pipeline.frames_rejected,
        )
    return 0


def _cli_overrides(args: Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    kiss: dict[str, Any] = {}
    if getattr(args, "kiss_host", None):
        kiss["host"] = args.kiss_host
    if getattr(args, "kiss_port", None):
        kiss["port"] = args.kiss_port
    if kiss:
        overrides["kiss"] = kiss
    if getattr(args, "json", False):
        overrides["output"] = {"format": "json"}
    return overrides


def _wait_for_kiss(
    client: KISSClient, attempts: int = 5, base_delay: float = 1.0
) -> bool:
    """Try to connect, doubling the delay between failed attempts."""
    delay = base_delay
    for attempt in range(1, attempts + 1):
        try:
            client.connect()
            return True
        except KISSClientError as exc:
            logger.warning("KISS connection attempt %d/%d failed: %s", attempt, attempts, exc)
            if attempt < attempts:
                time.sleep(delay)
                delay *= 2
    return False
