"""Shared fixtures for impgen tests."""

import logging
import struct
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pytest

from impgen.core.probe import AudioProbe


# ---------------------------------------------------------------------------
# Audio helpers
# ---------------------------------------------------------------------------


def create_wav(
    path: Path,
    duration_seconds: float = 1.0,
    sample_rate: int = 44100,
    channels: int = 2,
    bits: int = 16,
) -> Path:
    """Create a minimal valid PCM WAV file of silence."""
    block_align = channels * (bits // 8)
    frames = int(duration_seconds * sample_rate)
    data_size = frames * block_align
    byte_rate = sample_rate * block_align

    with open(path, "wb") as f:
        # RIFF header
        f.write(b"RIFF")
        f.write(struct.pack("<I", 36 + data_size))
        f.write(b"WAVE")
        # fmt chunk
        f.write(b"fmt ")
        f.write(struct.pack("<I", 16))  # chunk size
        f.write(struct.pack("<H", 1))   # PCM
        f.write(struct.pack("<H", channels))
        f.write(struct.pack("<I", sample_rate))
        f.write(struct.pack("<I", byte_rate))
        f.write(struct.pack("<H", block_align))
        f.write(struct.pack("<H", bits))
        # data chunk
        f.write(b"data")
        f.write(struct.pack("<I", data_size))
        f.write(b"\x00" * data_size)
    return path


def ffprobe_stream(
    duration_ts: Optional[int] = 2_500_000,
    sample_rate: Optional[str] = "44100",
    channels: Optional[int] = 2,
    bits_per_sample: Optional[int] = 16,
) -> Dict[str, Any]:
    """A first-stream dictionary shaped like ffprobe's JSON output."""
    stream: Dict[str, Any] = {"codec_type": "audio", "codec_name": "pcm_s16le"}
    if duration_ts is not None:
        stream["duration_ts"] = duration_ts
        rate = int(sample_rate) if sample_rate else 22050
        stream["duration"] = f"{duration_ts / rate:.6f}"
    if sample_rate is not None:
        stream["sample_rate"] = sample_rate
    if channels is not None:
        stream["channels"] = channels
    if bits_per_sample is not None:
        stream["bits_per_sample"] = bits_per_sample
    return stream


# ---------------------------------------------------------------------------
# Fake probe
# ---------------------------------------------------------------------------


class FakeProbe(AudioProbe):
    """Probe returning canned output per file name, without running ffprobe."""

    name = "fake"

    def __init__(self, responses: Optional[Dict[str, Union[Dict[str, Any], Exception]]] = None,
                 default: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.default = default if default is not None else ffprobe_stream()
        self.calls = []

    def check_available(self) -> None:
        return None

    def probe(self, file_path: Path) -> Dict[str, Any]:
        self.calls.append(file_path)
        response = self.responses.get(file_path.name, self.default)
        if isinstance(response, Exception):
            raise response
        return dict(response)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_probe():
    """FakeProbe reporting 44.1 kHz 16-bit stereo, 10,000,000 bytes of data."""
    return FakeProbe()


@pytest.fixture
def music_dir(tmp_path):
    """Directory holding placeholder WAV files for fake-probe batches."""
    directory = tmp_path / "music"
    directory.mkdir()
    for name in ("AMBIENT1.wav", "FRCONCOURSE.WAV"):
        (directory / name).write_bytes(b"")
    (directory / "notes.txt").write_text("not audio")
    return directory


@pytest.fixture(autouse=True)
def _isolate_root_logger():
    """Remove console and file handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
