"""
kkpmerge Configuration

Loads configuration from a YAML file, then applies environment variable
overrides. Command line flags are applied on top by the CLI.
"""

import codecs
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".kkpmerge" / "config.yaml",
    Path("kkpmerge.yaml"),
]


DEFAULT_CONFIG = {
    "output_path": "merged.kkp",
    "symbol_matching": "strict",    # strict | prefix
    "string_encoding": "utf-8",     # names are decoded with surrogateescape
    "log_level": "INFO",
    "report_path": None,            # JSON merge report, disabled by default
}


ENV_MAPPINGS = {
    "KKPMERGE_OUTPUT": "output_path",
    "KKPMERGE_SYMBOL_MATCHING": "symbol_matching",
    "KKPMERGE_LOG_LEVEL": "log_level",
    "KKPMERGE_REPORT": "report_path",
}


class ConfigError(Exception):
    """Configuration file could not be used."""


class MergeConfig:
    """Configuration for a merge run."""

    def __init__(self, config_path: Optional[Path] = None, use_env: bool = True):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        self._load_config(config_path)

        if use_env:
            self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        if explicit_path is not None:
            explicit_path = Path(explicit_path)
            if not explicit_path.exists():
                raise ConfigError(f"config file not found: {explicit_path}")
            search_paths = [explicit_path]
        else:
            search_paths = CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if config_path.exists():
                try:
                    with open(config_path, "r", encoding="utf-8") as f:
                        user_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    if explicit_path is not None:
                        raise ConfigError(f"failed to load config from {config_path}: {e}") from e
                    logger.warning(f"Failed to load config from {config_path}: {e}")
                    continue
                if not isinstance(user_config, dict):
                    raise ConfigError(f"{config_path}: top level must be a mapping")
                self._config.update(user_config)
                self._config_path = config_path
                logger.debug(f"Loaded config from {config_path}")
                return

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for env_var, config_key in ENV_MAPPINGS.items():
            if env_var in os.environ:
                self._config[config_key] = os.environ[env_var]

    def update(self, **overrides: Any) -> None:
        """Apply explicit overrides, ignoring None values."""
        for key, value in overrides.items():
            if value is not None:
                self._config[key] = value

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def output_path(self) -> Path:
        return Path(self._config["output_path"])

    @property
    def symbol_matching(self) -> str:
        value = str(self._config["symbol_matching"]).lower()
        if value not in ("strict", "prefix"):
            raise ConfigError(f"symbol_matching must be 'strict' or 'prefix', got {value!r}")
        return value

    @property
    def string_encoding(self) -> str:
        value = str(self._config["string_encoding"])
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ConfigError(f"unknown string_encoding {value!r}") from e
        return value

    @property
    def log_level(self) -> str:
        return str(self._config["log_level"]).upper()

    @property
    def report_path(self) -> Optional[Path]:
        value = self._config.get("report_path")
        return Path(value) if value else None

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._config)
