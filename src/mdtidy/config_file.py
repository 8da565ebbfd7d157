"""Locate, load and save mdtidy configuration files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from mdtidy.config import CONFIG_FILE_NAMES, CONFIG_FILE_PERMISSIONS
from mdtidy.exceptions import ConfigError
from mdtidy.schemas import FormatterConfig

logger = logging.getLogger(__name__)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search ``start_dir`` and its parents for a config file.

    Within a directory the names in ``CONFIG_FILE_NAMES`` are tried in order.

    Args:
        start_dir: Directory to start from (defaults to cwd).

    Returns:
        Path to the first config file found, or None.
    """
    current = Path(start_dir or Path.cwd()).resolve()
    while True:
        for name in CONFIG_FILE_NAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(path: Path) -> FormatterConfig:
    """Load a YAML or JSON config file on top of the defaults.

    Raises:
        ConfigError: The file cannot be read, parsed or validated.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping, got {type(data).__name__}")

    try:
        config = FormatterConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {path}: {exc}") from exc

    logger.debug("Loaded config", extra={"path": str(path)})
    return config


def save_config(config: FormatterConfig, path: Path) -> None:
    """Write ``config`` as YAML, readable only by the owner.

    Raises:
        ConfigError: The file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dump_config(config), encoding="utf-8")
        os.chmod(path, CONFIG_FILE_PERMISSIONS)
    except OSError as exc:
        raise ConfigError(f"failed to write config file {path}: {exc}") from exc


def dump_config(config: FormatterConfig) -> str:
    """Serialize ``config`` to YAML using file-format keys."""
    return yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False)


def resolve_config(config_path: Path | None = None, start_dir: Path | None = None) -> FormatterConfig:
    """Return the effective configuration.

    Uses ``config_path`` when given, else the nearest config file above
    ``start_dir``, else the built-in defaults.
    """
    if config_path is not None:
        return load_config(config_path)

    found = find_config_file(start_dir)
    if found is None:
        logger.debug("No config file found, using defaults")
        return FormatterConfig()
    return load_config(found)
