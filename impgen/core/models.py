"""
Core data models for the iMUSE map generator.

Immutable domain models for probed audio parameters, computed segment
plans and the map documents rendered from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class AudioParameters:
    """
    Normalized audio format and duration for one file.

    Byte quantities use left-to-right integer arithmetic, which is
    what the VIMA compressor expects for PCM data sizes.
    """

    sample_rate: int  # Hz
    bits_per_sample: int
    channel_count: int
    duration_in_samples: int
    duration_seconds: float  # informational only

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.bits_per_sample // 8 * self.channel_count

    @property
    def data_size_bytes(self) -> int:
        return self.duration_in_samples * self.bits_per_sample // 8 * self.channel_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'sample_rate': self.sample_rate,
            'bits_per_sample': self.bits_per_sample,
            'channel_count': self.channel_count,
            'duration_in_samples': self.duration_in_samples,
            'duration_seconds': self.duration_seconds,
            'bytes_per_second': self.bytes_per_second,
            'data_size_bytes': self.data_size_bytes,
        }


@dataclass(frozen=True)
class Segment:
    """A contiguous byte range of the raw audio data."""

    length_bytes: int
    start_position_bytes: int

    @property
    def end_position_bytes(self) -> int:
        return self.start_position_bytes + self.length_bytes

    def to_dict(self) -> Dict[str, int]:
        return {
            'start_position_bytes': self.start_position_bytes,
            'length_bytes': self.length_bytes,
        }


@dataclass(frozen=True)
class SegmentPlan:
    """Intro, loop and outro segments laid out back to back from offset 0."""

    intro: Segment
    loop: Segment
    outro: Segment
    data_size_bytes: int
    used_fallback: bool = False

    @property
    def stop_position(self) -> int:
        return self.outro.end_position_bytes

    @property
    def total_length(self) -> int:
        return self.intro.length_bytes + self.loop.length_bytes + self.outro.length_bytes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'intro': self.intro.to_dict(),
            'loop': self.loop.to_dict(),
            'outro': self.outro.to_dict(),
            'stop_position': self.stop_position,
            'data_size_bytes': self.data_size_bytes,
            'used_fallback': self.used_fallback,
        }


FieldValue = Union[int, str]


@dataclass(frozen=True)
class MapBlock:
    """One ``[NAME]`` block of an iMUSE map with its ordered ``Key = Value`` fields."""

    name: str
    fields: Tuple[Tuple[str, FieldValue], ...]

    def get(self, key: str) -> Optional[FieldValue]:
        for field_key, value in self.fields:
            if field_key == key:
                return value
        return None


@dataclass(frozen=True)
class MusicMap:
    """An ordered iMUSE map document."""

    blocks: Tuple[MapBlock, ...]

    def block(self, name: str) -> MapBlock:
        for block in self.blocks:
            if block.name == name:
                return block
        raise KeyError(name)

    @property
    def block_names(self) -> List[str]:
        return [block.name for block in self.blocks]


@dataclass
class ProcessedTrack:
    """Outcome of a successfully mapped input file."""

    source_path: Path
    track_name: str
    parameters: AudioParameters
    plan: SegmentPlan
    map_path: Optional[Path] = None
    processing_time: float = 0.0
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'source_path': str(self.source_path),
            'track_name': self.track_name,
            'parameters': self.parameters.to_dict(),
            'segments': self.plan.to_dict(),
            'map_path': str(self.map_path) if self.map_path else None,
            'processing_time': self.processing_time,
            'notes': list(self.notes),
        }
