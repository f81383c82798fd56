"""Configuration loading and persistence helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w  # type: ignore[import]

from . import config_layering

CONFIG_VERSION = 1
CONFIG_ENV_VAR = "KISS_APRS_CONFIG_PATH"
CONFIG_DIR_NAME = "kiss-aprs"
CONFIG_FILENAME = "config.toml"
OUTPUT_FORMATS = ("text", "json")


def _xdg_path(env_var: str, default: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return default


def get_config_dir() -> Path:
    """Return the directory containing configuration files."""
    default = Path.home() / ".config"
    return _xdg_path("XDG_CONFIG_HOME", default) / CONFIG_DIR_NAME


def get_data_dir() -> Path:
    """Return the directory for runtime data/log files."""
    default = Path.home() / ".local" / "share"
    return _xdg_path("XDG_DATA_HOME", default) / CONFIG_DIR_NAME


def get_logs_dir() -> Path:
    return get_data_dir() / "logs"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Resolve the configuration file path, honouring overrides."""
    if path is not None:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / CONFIG_FILENAME


@dataclass(slots=True)
class DecoderConfig:
    """KISS source, output and logging settings for the decoder CLI."""

    kiss_host: str = "127.0.0.1"
    kiss_port: int = 8001
    kiss_timeout: float = 2.0
    output_format: str = "text"
    show_unknown: bool = True
    show_errors: bool = False
    log_level: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to a TOML-serialisable dictionary."""
        return {
            "version": CONFIG_VERSION,
            "kiss": {
                "host": self.kiss_host,
                "port": self.kiss_port,
                "timeout": self.kiss_timeout,
            },
            "output": {
                "format": self.output_format,
                "show_unknown": self.show_unknown,
                "show_errors": self.show_errors,
            },
            "logging": _drop_none({"level": self.log_level}),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecoderConfig:
        """Construct from a dictionary (typically parsed from TOML)."""
        version = data.get("version", CONFIG_VERSION)
        if version != CONFIG_VERSION:
            raise ValueError(f"Unsupported config version: {version}")

        kiss = data.get("kiss", {})
        output = data.get("output", {})
        logging_section = data.get("logging", {})

        output_format = str(output.get("format", "text")).lower()
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")

        port = int(kiss.get("port", 8001))
        if not 0 < port < 65536:
            raise ValueError(f"KISS port out of range: {port}")

        level = logging_section.get("level")
        return cls(
            kiss_host=str(kiss.get("host", "127.0.0.1")),
            kiss_port=port,
            kiss_timeout=float(kiss.get("timeout", 2.0)),
            output_format=output_format,
            show_unknown=bool(output.get("show_unknown", True)),
            show_errors=bool(output.get("show_errors", False)),
            log_level=str(level) if level not in (None, "") else None,
        )


def _drop_none(mapping: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def load_config(
    path: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> DecoderConfig:
    """Load configuration, applying environment and CLI overrides.

    A missing file is not an error; defaults are used for anything unset.
    """
    config_path = resolve_config_path(path)
    data = config_layering.load_layered_config(config_path, cli_overrides)
    return DecoderConfig.from_dict(data)


def save_config(config: DecoderConfig, path: str | Path | None = None) -> Path:
    """Persist configuration to disk and return the file path."""
    config_path = resolve_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(tomli_w.dumps(config.to_dict()), encoding="utf-8")
    return config_path


def config_summary(config: DecoderConfig) -> str:
    """Generate a human-readable summary of key settings."""
    return (
        f"  KISS     : {config.kiss_host}:{config.kiss_port} (timeout {config.kiss_timeout:g}s)\n"
        f"  Output   : {config.output_format}"
        f" (unknown={'on' if config.show_unknown else 'off'},"
        f" errors={'on' if config.show_errors else 'off'})\n"
        f"  Logging  : {config.log_level or 'default'}"
    )
