"""
Core module containing data models, probing, segment calculation and map output.
"""

from impgen.core.models import (
    AudioParameters,
    Segment,
    SegmentPlan,
    MapBlock,
    MusicMap,
    ProcessedTrack,
)
from impgen.core.probe import (
    AudioProbe,
    FFprobeProbe,
    SoundfileProbe,
    check_dependencies,
    create_probe,
    probe_file,
    resolve_parameters,
)
from impgen.core.segments import compute_segments, plan_for, segment_seconds, verify_plan
from impgen.core.serializer import DEFAULT_LOOP_COUNT, build_music_map, render, serialize
from impgen.core.map_writer import (
    ImpFileWriter,
    ReportWriter,
    TextReportWriter,
    JSONReportWriter,
    create_report_writer,
)
from impgen.core.batch_processor import BatchProcessor, BatchResult

__all__ = [
    # Models
    "AudioParameters",
    "Segment",
    "SegmentPlan",
    "MapBlock",
    "MusicMap",
    "ProcessedTrack",
    # Probing
    "AudioProbe",
    "FFprobeProbe",
    "SoundfileProbe",
    "check_dependencies",
    "create_probe",
    "probe_file",
    "resolve_parameters",
    # Segments and serialization
    "compute_segments",
    "plan_for",
    "segment_seconds",
    "verify_plan",
    "DEFAULT_LOOP_COUNT",
    "build_music_map",
    "render",
    "serialize",
    # Output
    "ImpFileWriter",
    "ReportWriter",
    "TextReportWriter",
    "JSONReportWriter",
    "create_report_writer",
    # Batch processing
    "BatchProcessor",
    "BatchResult",
]
