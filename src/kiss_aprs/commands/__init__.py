"""Command implementations for the kiss-aprs CLI."""

from .decode import run_decode
from .listen import run_listen
from .setup import run_setup

__all__ = ["run_decode", "run_listen", "run_setup"]
