"""
Configuration management for the iMUSE map generator.

Loads and validates configuration from YAML files with environment
variable interpolation support.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from impgen.utils.errors import ConfigurationError


PROBE_BACKENDS = ("ffprobe", "soundfile")

CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
    "input.extensions": {"type": list},
    "input.recursive": {"type": bool},
    "probe.backend": {"type": str, "required": True},
    "probe.ffprobe_path": {"type": str},
    "logging.level": {"type": str},
    "logging.format": {"type": str},
}


class ConfigManager:
    """
    Manages application configuration loaded from YAML files.

    Features:
    - YAML configuration loading
    - Environment variable interpolation (${VAR_NAME})
    - Nested key access with dot notation
    - Configuration validation
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = config_dict or {}
        self._env_pattern = re.compile(r'\$\{([^}]+)\}')

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Create ConfigManager from YAML file.

        Values in the file are layered over the defaults, so a file only
        needs the keys it changes.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        if not file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                config_key=str(file_path)
            )

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration: {e}",
                config_key=str(file_path)
            )

        if not isinstance(config_dict, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping",
                config_key=str(file_path)
            )

        manager = cls(_merge(get_default_config(), config_dict))
        manager._interpolate_env_vars()
        return manager

    def _interpolate_env_vars(self) -> None:
        """Replace ${ENV_VAR} patterns with environment variable values."""
        self._config = self._interpolate_value(self._config)

    def _interpolate_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._interpolate_value(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._interpolate_value(item) for item in value]
        if isinstance(value, str):
            return self._interpolate_string(value)
        return value

    def _interpolate_string(self, s: str) -> str:
        """Replace ${ENV_VAR} with environment variable value."""
        def replace(match: re.Match) -> str:
            value = os.environ.get(match.group(1))
            if value is None:
                return match.group(0)  # Keep original if not found
            return value

        return self._env_pattern.sub(replace, s)

    def get(
        self,
        key: str,
        default: Any = None,
        required: bool = False
    ) -> Any:
        """
        Get configuration value using dot notation.

        Example:
            config.get("probe.backend", default="ffprobe")
            config.get("probe.ffprobe_path", required=True)

        Raises:
            ConfigurationError: If required key is not found
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                if required:
                    raise ConfigurationError(
                        f"Required configuration key not found: {key}",
                        config_key=key
                    )
                return default

        return value

    def get_section(self, key: str) -> Dict[str, Any]:
        """Get an entire configuration section (empty dict if not found)."""
        value = self.get(key, default={})
        if not isinstance(value, dict):
            return {}
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value using dot notation.

        Example:
            config.set("output.directory", "maps")
        """
        keys = key.split('.')
        current = self._config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Optional[Dict[str, Any]] = None) -> None:
        """
        Validate configuration against a schema.

        Schema format:
            {
                "probe.backend": {"type": str, "required": True},
                "input.recursive": {"type": bool}
            }

        Raises:
            ConfigurationError: If validation fails
        """
        for key, rules in (schema or CONFIG_SCHEMA).items():
            value = self.get(key)
            expected_type = rules.get("type")

            if value is None:
                if rules.get("required", False):
                    raise ConfigurationError(
                        f"Required configuration missing: {key}",
                        config_key=key
                    )
                continue

            if expected_type and not isinstance(value, expected_type):
                raise ConfigurationError(
                    f"Invalid type for {key}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__}",
                    config_key=key
                )

        backend = self.get("probe.backend")
        if backend not in PROBE_BACKENDS:
            raise ConfigurationError(
                f"Unknown probe backend: {backend}. "
                f"Supported: {', '.join(PROBE_BACKENDS)}",
                config_key="probe.backend"
            )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively layer ``override`` on top of ``base``."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Optional[str] = None) -> ConfigManager:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to config file. If None, tries
                     "config/config.yaml", "config.yaml" and "impgen.yaml"
                     in the working directory.

    Raises:
        ConfigurationError: If an explicitly given file does not exist,
                            cannot be parsed or fails validation
    """
    if config_path is None:
        for path in (Path("config/config.yaml"), Path("config.yaml"), Path("impgen.yaml")):
            if path.exists():
                config_path = str(path)
                break

    if config_path:
        manager = ConfigManager.from_file(Path(config_path))
    else:
        manager = ConfigManager(get_default_config())

    manager.validate()
    return manager


def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "input": {
            "extensions": [".wav"],
            "recursive": False,
        },
        "probe": {
            "backend": "ffprobe",
            "ffprobe_path": "ffprobe",
        },
        "output": {
            "directory": None,
        },
        "logging": {
            "level": "INFO",
            "format": "text",
            "file": None,
        },
    }
