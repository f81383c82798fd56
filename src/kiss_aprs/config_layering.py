"""Configuration layering support.

Merges a TOML configuration file with environment and CLI overrides.
Precedence (later overrides earlier): config file < KISS_APRS_* environment
variables < CLI arguments.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

ENV_PREFIX = "KISS_APRS_"
# Handled elsewhere; never treated as configuration keys.
_RESERVED_ENV_KEYS = frozenset({"CONFIG_PATH", "LOG_LEVEL"})


def load_layered_config(
    config_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Load and merge configuration from the file, environment and CLI.

    Args:
        config_path: TOML file to load; a missing file contributes nothing.
        cli_overrides: Nested dictionary of CLI-provided overrides.

    Returns:
        Merged configuration dictionary.
    """
    result: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        result = _load_toml_file(config_path)

    env_overrides = _extract_env_overrides()
    if env_overrides:
        result = _deep_merge(result, env_overrides)

    if cli_overrides:
        result = _deep_merge(result, cli_overrides)

    return result


def _load_toml_file(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)  # type: ignore[no-any-return]


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, preferring override values."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _extract_env_overrides() -> dict[str, Any]:
    """Extract KISS_APRS_* environment variables into a nested config dict.

    - KISS_APRS_SECTION__KEY → {"section": {"key": value}}
    - KISS_APRS_KEY → {"key": value}

    Example:
        KISS_APRS_KISS__HOST=10.0.0.5 → {"kiss": {"host": "10.0.0.5"}}
    """
    overrides: dict[str, Any] = {}

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        suffix = env_key[len(ENV_PREFIX) :]
        if not suffix or suffix in _RESERVED_ENV_KEYS:
            continue

        parts = suffix.lower().split("__")
        if len(parts) == 1:
            overrides[parts[0]] = _parse_env_value(env_value)
        elif len(parts) == 2:
            section, key = parts
            if section not in overrides:
                overrides[section] = {}
            if isinstance(overrides[section], dict):
                overrides[section][key] = _parse_env_value(env_value)

    return overrides


def _parse_env_value(raw: str) -> Any:
    """Parse an environment string into bool, int, float or str."""
    lower = raw.lower()
    if lower == "true":
        return True
    if lower == "false":
        return False
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    return raw
