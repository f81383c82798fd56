"""kiss-aprs package.

Expose a single runtime version value (``__version__``) so the CLI can
report it without duplicating fallback logic.
"""

from importlib import metadata as _importlib_metadata

try:
    __version__ = _importlib_metadata.version("kiss-aprs")
except _importlib_metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"

__all__ = ["__version__"]
