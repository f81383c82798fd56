"""Small time utilities used by the CLI output."""
from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Return current UTC time formatted as YYYY-MM-DDTHH:MM:SSZ."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
