"""
Utility modules for configuration, logging, and error handling.
"""

from impgen.utils.errors import (
    ImpGenError,
    DependencyMissingError,
    UnreadableAudioError,
    MissingDurationError,
    SegmentConsistencyError,
    MapWriteError,
    ConfigurationError,
)
from impgen.utils.logging import get_logger, setup_logging, JSONFormatter
from impgen.utils.config import ConfigManager, load_config

__all__ = [
    "ImpGenError",
    "DependencyMissingError",
    "UnreadableAudioError",
    "MissingDurationError",
    "SegmentConsistencyError",
    "MapWriteError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
]
