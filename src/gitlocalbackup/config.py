"""Load and merge backup settings from YAML files and command-line values."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models.config import BackupConfig

logger = logging.getLogger(__name__)


def parse_config_text(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse YAML *text* into a mapping of raw (unvalidated) settings."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.error("YAML parse error in %s: %s", source, exc)
        raise ConfigError(f"Invalid YAML in {source}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: Path) -> dict[str, Any]:
    """Read the YAML config file at *path*."""
    try:
        text = path.expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return parse_config_text(text, str(path))


async def async_load_config(path: Path) -> dict[str, Any]:
    """Async variant of :func:`load_config`."""
    try:
        async with aiofiles.open(path.expanduser(), encoding="utf-8") as fh:
            text = await fh.read()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return parse_config_text(text, str(path))


def merge_config(
    file_values: dict[str, Any] | None = None,
    **overrides: Any,
) -> BackupConfig:
    """Validate *file_values* with non-``None`` *overrides* applied on top.

    Override keys use the underscored field names; file keys may use
    either spelling.
    """
    values = {key.replace("-", "_"): value for key, value in (file_values or {}).items()}
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return BackupConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
