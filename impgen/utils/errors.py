"""
Custom exceptions for the iMUSE map generator.

Per-file errors (unreadable audio, missing duration, inconsistent segments,
write failures) skip a single file; dependency and configuration errors
abort the whole run.
"""

from typing import Optional, Any


class ImpGenError(Exception):
    """Base exception for all map generation errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DependencyMissingError(ImpGenError):
    """Raised when a required external tool or library is not available."""

    def __init__(self, dependency: str, install_hint: Optional[str] = None):
        super().__init__(
            f"{dependency} is required but was not found.",
            details={"dependency": dependency},
        )
        self.dependency = dependency
        self.install_hint = install_hint


class UnreadableAudioError(ImpGenError):
    """Raised when the probe cannot read a file as audio."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class MissingDurationError(ImpGenError):
    """Raised when the probe output carries no usable duration."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class SegmentConsistencyError(ImpGenError):
    """Raised when computed segments do not add up to the audio data size."""

    def __init__(self, expected: int, actual: int, track_name: Optional[str] = None):
        super().__init__(
            f"Segment length calculation error: expected total {expected} bytes, "
            f"calculated {actual} bytes",
            details={"track_name": track_name, "expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual
        self.track_name = track_name


class MapWriteError(ImpGenError):
    """Raised when a map file cannot be written."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class ConfigurationError(ImpGenError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}
