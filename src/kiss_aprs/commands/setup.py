"""Write a decoder configuration file from command-line options."""

from __future__ import annotations

import logging
from argparse import Namespace

import tomli_w  # type: ignore[import]

from kiss_aprs import config as config_module
from kiss_aprs.config import DecoderConfig

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def run_setup(args: Namespace) -> int:
    config_path = config_module.resolve_config_path(getattr(args, "config", None))
    if config_path.exists() and not getattr(args, "reset", False):
        logger.error(
            "Config already exists at %s; pass --reset to overwrite.", config_path
        )
        return 1

    try:
        settings = DecoderConfig.from_dict(
            {
                "kiss": {
                    "host": getattr(args, "kiss_host", None) or "127.0.0.1",
                    "port": getattr(args, "kiss_port", None) or 8001,
                    "timeout": getattr(args, "timeout", None) or 2.0,
                },
                "output": {"format": "json" if getattr(args, "json", False) else "text"},
            }
        )
    except ValueError as exc:
        logger.error("Invalid settings: %s", exc)
        return 1

    if getattr(args, "dry_run", False):
        print(tomli_w.dumps(settings.to_dict()), end="")
        return 0

    written = config_module.save_config(settings, config_path)
    print(f"Configuration written to {written}")
    print(config_module.config_summary(settings))
    return 0
