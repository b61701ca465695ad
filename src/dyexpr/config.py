"""Persisted configuration (``~/.dynein/config.yml``).

Only the ``query.strict_mode`` setting is read here; other keys written by the
full client (region, table in use, ...) are ignored.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dyexpr.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV_VAR = "DYNEIN_CONFIG_DIR"
CONFIG_DIR = ".dynein"
CONFIG_FILE_NAME = "config.yml"


@dataclass
class QueryConfig:
    """Settings for query commands."""
    strict_mode: bool = False


@dataclass
class Config:
    query: QueryConfig = field(default_factory=QueryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        query = data.get("query") or {}
        if not isinstance(query, dict):
            raise ConfigurationError("'query' in configuration must be a mapping")
        strict_mode = query.get("strict_mode", False)
        if not isinstance(strict_mode, bool):
            raise ConfigurationError(
                f"'query.strict_mode' must be true or false, got {strict_mode!r}"
            )
        return cls(query=QueryConfig(strict_mode=strict_mode))


def config_path() -> Path:
    """Return the configuration file path.

    The directory holding ``.dynein`` is the home directory unless the
    ``DYNEIN_CONFIG_DIR`` environment variable names another one.
    """
    base = os.environ.get(CONFIG_DIR_ENV_VAR)
    root = Path(base) if base else Path.home()
    return root / CONFIG_DIR / CONFIG_FILE_NAME


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML; a missing file yields the defaults."""
    path = Path(path) if path is not None else config_path()
    if not path.exists():
        logger.debug("no configuration file at %s, using defaults", path)
        return Config()
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse configuration file {path}: {e}") from e
    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    config = Config.from_dict(data)
    logger.debug("loaded configuration from %s: %r", path, config)
    return config


def resolve_strict_mode(
    strict: bool = False,
    non_strict: bool = False,
    config: Config | None = None,
) -> bool:
    """Decide the sort key policy from command line flags and configuration.

    ``--strict`` and ``--non-strict`` are mutually exclusive. Either flag wins
    over the configured ``query.strict_mode``; with neither, the configuration
    decides (non-strict when unset).
    """
    if strict and non_strict:
        raise ConfigurationError("--strict and --non-strict cannot be used together")
    if strict or non_strict:
        return strict or not non_strict
    if config is None:
        return False
    return config.query.strict_mode
