import logging
import os
from typing import Any, Dict, List, Optional, Type

import yaml

from gfakit.optfields import NoTags, OptFields, OptionalFields

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "optional_fields": "all",
    "segment_ids": "bytes",
    "segments": True,
    "links": True,
    "containments": True,
    "paths": True,
    "progress": False,
}

LOG_LEVELS: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RECORD_TOGGLES: List[str] = ["segments", "links", "containments", "paths"]

OPTIONAL_FIELD_POLICIES: Dict[str, Type[OptFields]] = {
    "all": OptionalFields,
    "none": NoTags,
}


class ConfigurationError(Exception):
    """Custom exception for configuration errors."""
    pass


class Config:
    """
    Settings for parsing GFA, PAF and GAF files.

    Loads settings from a YAML file and applies explicit overrides (usually
    command-line options) on top of it.
    """
    def __init__(self):
        self._settings: Dict[str, Any] = DEFAULT_CONFIG.copy()

    def load(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> 'Config':
        """
        Loads configuration from a file and overrides.

        Args:
            config_file: Optional path to a YAML configuration file.
            overrides: Settings that take precedence over the file; keys
                       whose value is None are ignored.
        """
        # 1. Load from config file if specified
        if config_file:
            if not os.path.exists(config_file):
                raise ConfigurationError(f"Config file not found: {config_file}")
            try:
                with open(config_file, 'r') as f:
                    file_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Error parsing config file {config_file}: {e}")
            except OSError as e:
                raise ConfigurationError(f"Error reading config file {config_file}: {e}")
            if file_config:  # Check if file is not empty
                if not isinstance(file_config, dict):
                    raise ConfigurationError(f"Config file {config_file} must contain a mapping")
                self._settings.update(file_config)

        # 2. Apply overrides that were actually provided
        if overrides:
            self._settings.update({key: value for key, value in overrides.items() if value is not None})

        # 3. Validate
        self._validate()
        return self

    def _validate(self):
        """Checks that every setting has an allowed value."""
        unknown = sorted(set(self._settings) - set(DEFAULT_CONFIG))
        if unknown:
            raise ConfigurationError(f"Unknown configuration parameters: {', '.join(unknown)}")

        log_level = str(self._settings["log_level"]).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self._settings['log_level']}")
        self._settings["log_level"] = log_level

        if self._settings["optional_fields"] not in OPTIONAL_FIELD_POLICIES:
            raise ConfigurationError(
                f"optional_fields must be one of {', '.join(OPTIONAL_FIELD_POLICIES)}, "
                f"got {self._settings['optional_fields']!r}"
            )
        if self._settings["segment_ids"] not in ("bytes", "usize"):
            raise ConfigurationError(f"segment_ids must be 'bytes' or 'usize', got {self._settings['segment_ids']!r}")

        for key in RECORD_TOGGLES + ["progress"]:
            if not isinstance(self._settings[key], bool):
                raise ConfigurationError(f"{key} must be true or false, got {self._settings[key]!r}")

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value."""
        return self._settings.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Retrieves all configuration settings."""
        return self._settings.copy()

    def optional_fields_class(self) -> Type[OptFields]:
        """The capture policy named by `optional_fields`."""
        return OPTIONAL_FIELD_POLICIES[self._settings["optional_fields"]]

    def log_level(self) -> int:
        return getattr(logging, self._settings["log_level"])
