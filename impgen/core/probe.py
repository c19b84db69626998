"""
Audio parameter resolver for the iMUSE map generator.

Probes an audio file for its format and duration and normalizes the
result into AudioParameters. Two probe backends report the same flat
dictionary, keyed the way ffprobe names stream fields:

    duration_ts, duration, sample_rate, bits_per_sample, channels

- ``ffprobe``: runs the ffmpeg probe tool once per file (default)
- ``soundfile``: reads the header through libsndfile
"""

import json
import logging
import math
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from impgen.core.models import AudioParameters
from impgen.utils.errors import (
    ConfigurationError,
    DependencyMissingError,
    MissingDurationError,
    UnreadableAudioError,
)


DEFAULT_SAMPLE_RATE: int = 22050  # Hz
DEFAULT_BITS_PER_SAMPLE: int = 16
DEFAULT_CHANNEL_COUNT: int = 2

FFPROBE_INSTALL_HINT = (
    "Install with:\n"
    "  macOS: brew install ffmpeg\n"
    "  Ubuntu/Debian: sudo apt-get install ffmpeg"
)
SOUNDFILE_INSTALL_HINT = "Install with:\n  pip install soundfile"

logger = logging.getLogger(__name__)


class AudioProbe(ABC):
    """Reports raw format and duration fields for an audio file."""

    name: str = "probe"

    @abstractmethod
    def check_available(self) -> None:
        """Raise DependencyMissingError if the backend cannot run."""

    @abstractmethod
    def probe(self, file_path: Path) -> Dict[str, Any]:
        """
        Probe one file.

        Raises:
            UnreadableAudioError: The file could not be read as audio
        """


class FFprobeProbe(AudioProbe):
    """Probe backed by the ``ffprobe`` command line tool."""

    name = "ffprobe"

    def __init__(self, executable: str = "ffprobe"):
        self.executable = executable

    def check_available(self) -> None:
        if shutil.which(self.executable) is None:
            raise DependencyMissingError("ffprobe (from ffmpeg)", install_hint=FFPROBE_INSTALL_HINT)

    def build_command(self, file_path: Path) -> list:
        return [
            self.executable,
            "-v", "error",
            "-show_streams",
            "-show_format",
            "-of", "json",
            str(file_path),
        ]

    def probe(self, file_path: Path) -> Dict[str, Any]:
        try:
            result = subprocess.run(
                self.build_command(file_path),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise DependencyMissingError(
                f"ffprobe ({self.executable}: {e})", install_hint=FFPROBE_INSTALL_HINT
            )

        if result.returncode != 0:
            message = result.stderr.strip() or "ffprobe failed"
            raise UnreadableAudioError(
                f"Could not analyze {file_path.name} (may not be a valid audio file): {message}",
                file_path=str(file_path),
            )

        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise UnreadableAudioError(
                f"ffprobe returned invalid JSON for {file_path.name}: {e}",
                file_path=str(file_path),
            )

        streams = data.get("streams") if isinstance(data, dict) else None
        if not streams:
            logger.debug(f"ffprobe reported no streams for {file_path}")
            return {}
        return dict(streams[0])


class SoundfileProbe(AudioProbe):
    """Probe backed by libsndfile through the ``soundfile`` package."""

    name = "soundfile"

    def check_available(self) -> None:
        self._import()

    def _import(self):
        try:
            import soundfile
        except (ImportError, OSError) as e:
            raise DependencyMissingError(
                f"soundfile ({e})", install_hint=SOUNDFILE_INSTALL_HINT
            )
        return soundfile

    def probe(self, file_path: Path) -> Dict[str, Any]:
        sf = self._import()
        try:
            info = sf.info(str(file_path))
        except (RuntimeError, OSError) as e:
            # LibsndfileError subclasses RuntimeError
            raise UnreadableAudioError(
                f"Could not analyze {file_path.name} (may not be a valid audio file): {e}",
                file_path=str(file_path),
            )

        raw: Dict[str, Any] = {
            "duration_ts": info.frames,
            "duration": info.frames / info.samplerate if info.samplerate else None,
            "sample_rate": info.samplerate,
            "channels": info.channels,
        }
        bits = _bits_from_subtype(info.subtype)
        if bits is not None:
            raw["bits_per_sample"] = bits
        return raw


def _bits_from_subtype(subtype: Optional[str]) -> Optional[int]:
    """Map a libsndfile subtype such as ``PCM_16`` or ``FLOAT`` to a bit depth."""
    if not subtype:
        return None
    if subtype == "FLOAT":
        return 32
    if subtype == "DOUBLE":
        return 64
    match = re.search(r"(\d+)$", subtype)
    return int(match.group(1)) if match else None


def _positive_int(value: Any) -> Optional[int]:
    number = _non_negative_int(value)
    if number is None or number == 0:
        return None
    return number


def _non_negative_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number >= 0 else None


def _non_negative_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def resolve_parameters(raw: Dict[str, Any], file_path: Optional[Path] = None) -> AudioParameters:
    """
    Normalize raw probe output into AudioParameters.

    Missing sample rate, bit depth or channel count fall back to 22050 Hz,
    16 bits and 2 channels. Zero or unparsable values count as missing.

    Raises:
        MissingDurationError: Duration in samples or in seconds is missing
                              or unparsable
    """
    name = file_path.name if file_path else "input"

    duration_in_samples = _non_negative_int(raw.get("duration_ts"))
    duration_seconds = _non_negative_float(raw.get("duration"))
    if duration_in_samples is None or duration_seconds is None:
        raise MissingDurationError(
            f"Could not determine audio duration for {name}",
            file_path=str(file_path) if file_path else None,
        )

    sample_rate = _positive_int(raw.get("sample_rate")) or DEFAULT_SAMPLE_RATE
    bits_per_sample = _positive_int(raw.get("bits_per_sample")) or DEFAULT_BITS_PER_SAMPLE
    channel_count = _positive_int(raw.get("channels")) or DEFAULT_CHANNEL_COUNT

    return AudioParameters(
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        channel_count=channel_count,
        duration_in_samples=duration_in_samples,
        duration_seconds=duration_seconds,
    )


def probe_file(probe: AudioProbe, file_path: Path) -> AudioParameters:
    """Probe a file and resolve its audio parameters."""
    raw = probe.probe(file_path)
    logger.debug(f"{probe.name} output for {file_path.name}: {raw}")
    return resolve_parameters(raw, file_path)


def create_probe(config: Optional[Dict[str, Any]] = None) -> AudioProbe:
    """
    Factory function to create the configured probe backend.

    Args:
        config: The ``probe`` configuration section

    Raises:
        ConfigurationError: Unknown backend name
    """
    config = config or {}
    backend = str(config.get("backend", "ffprobe")).lower()

    if backend == "ffprobe":
        return FFprobeProbe(executable=config.get("ffprobe_path") or "ffprobe")
    if backend == "soundfile":
        return SoundfileProbe()
    raise ConfigurationError(
        f"Unknown probe backend: {backend}. Supported: ffprobe, soundfile",
        config_key="probe.backend",
    )


def check_dependencies(probe: AudioProbe) -> None:
    """
    Verify the probe backend can run before any file is processed.

    Raises:
        DependencyMissingError: The backend's tool or library is missing
    """
    probe.check_available()
    logger.debug(f"probe backend available: {probe.name}")
