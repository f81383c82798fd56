"""Command-line interface entry points for kiss-aprs."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from argparse import Namespace
from typing import Callable

from kiss_aprs import __version__
from kiss_aprs import config as config_module
from kiss_aprs.commands import run_decode, run_listen, run_setup

CommandHandler = Callable[[Namespace], int]

LOG_LEVEL_ENV_VAR = "KISS_APRS_LOG_LEVEL"

_LOG_LEVEL_ALIASES: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _resolve_log_level(candidate: str | None, configured: str | None = None) -> int:
    for value in (candidate, os.getenv(LOG_LEVEL_ENV_VAR), configured):
        if not value:
            continue
        stripped = value.strip()
        if not stripped:
            continue
        lower = stripped.lower()
        if lower in _LOG_LEVEL_ALIASES:
            return _LOG_LEVEL_ALIASES[lower]
        if stripped.isdigit():
            return int(stripped)
    return logging.INFO


def _configured_log_level(args: Namespace) -> str | None:
    try:
        return config_module.load_config(getattr(args, "config", None)).log_level
    except (OSError, ValueError):
        return None


def _configure_logging(level_name: str | None, configured: str | None = None) -> None:
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [stream_handler]

    try:
        log_dir = config_module.get_logs_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "kiss-aprs.log", encoding="utf-8")
        file_formatter = logging.Formatter(
            "%(asctime)sZ %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        file_formatter.converter = time.gmtime
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)
    except OSError:
        # Without a writable data directory, log to stderr only.
        pass

    logging.basicConfig(
        level=_resolve_log_level(level_name, configured),
        handlers=handlers,
        force=True,
    )


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        help="Path to configuration file (overrides default location)",
    )
    p.add_argument(
        "--json", action="store_true", help="Emit one JSON object per packet"
    )


def build_parser(handlers: dict[str, CommandHandler] | None = None) -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    handlers = handlers or _command_handlers()

    parser = argparse.ArgumentParser(
        prog="kiss-aprs",
        description="Decode APRS traffic from a KISS TNC byte stream.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment overrides:\n"
            f"  {LOG_LEVEL_ENV_VAR}    Default logging level when --log-level is omitted.\n"
            f"  {config_module.CONFIG_ENV_VAR}  Path to config.toml.\n"
            "  KISS_APRS_<SECTION>__<KEY>  Override a config value, e.g. KISS_APRS_KISS__PORT."
        ),
    )
    parser.add_argument("--version", action="version", version=f"kiss-aprs {__version__}")
    parser.add_argument(
        "--log-level",
        help="Set log verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL or numeric)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    listen_parser = subparsers.add_parser(
        "listen", help="Decode live traffic from a KISS TCP server"
    )
    listen_parser.set_defaults(handler=handlers["listen"])
    _add_common_flags(listen_parser)
    listen_parser.add_argument("--kiss-host", help="KISS server host")
    listen_parser.add_argument("--kiss-port", type=int, help="KISS server TCP port")
    listen_parser.add_argument(
        "--once", action="store_true", help="Exit after the first decoded packet"
    )

    decode_parser = subparsers.add_parser(
        "decode", help="Decode a captured KISS byte stream"
    )
    decode_parser.set_defaults(handler=handlers["decode"])
    _add_common_flags(decode_parser)
    decode_parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Capture file to read ('-' for stdin)",
    )
    decode_parser.add_argument(
        "--hex", action="store_true", help="Input is hex text rather than raw bytes"
    )

    setup_parser = subparsers.add_parser("setup", help="Write a configuration file")
    setup_parser.set_defaults(handler=handlers["setup"])
    _add_common_flags(setup_parser)
    setup_parser.add_argument("--kiss-host", help="KISS server host")
    setup_parser.add_argument("--kiss-port", type=int, help="KISS server TCP port")
    setup_parser.add_argument("--timeout", type=float, help="KISS read timeout (seconds)")
    setup_parser.add_argument(
        "--reset",
        action="store_true",
        help="Overwrite an existing configuration",
    )
    setup_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the configuration without writing it",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Process CLI arguments and dispatch to the requested command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(getattr(args, "log_level", None), _configured_log_level(args))

    handler: CommandHandler | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


def _command_handlers() -> dict[str, CommandHandler]:
    """Return the mapping of subcommand names to handler callables."""
    return {
        "listen": run_listen,
        "decode": run_decode,
        "setup": run_setup,
    }


if __name__ == "__main__":  # pragma: no cover - direct CLI execution path
    raise SystemExit(main())
