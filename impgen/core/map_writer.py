"""
Writers for generated map files and batch reports.

- ImpFileWriter: writes one serialized .imp map per track
- TextReportWriter / JSONReportWriter: summarize a whole batch run
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from impgen.core.segments import segment_seconds
from impgen.utils.errors import MapWriteError

if TYPE_CHECKING:
    from impgen.core.batch_processor import BatchResult


MAP_EXTENSION = ".imp"


class ImpFileWriter:
    """Writes serialized map text to ``<output_dir>/<track_name>.imp``."""

    def __init__(self, extension: str = MAP_EXTENSION):
        self.extension = extension
        self.logger = logging.getLogger("map_writer.imp")

    def path_for(self, track_name: str, output_dir: Path) -> Path:
        return Path(output_dir) / f"{track_name}{self.extension}"

    def write(self, track_name: str, text: str, output_dir: Path) -> Path:
        """
        Write one map file.

        Raises:
            MapWriteError: The directory or file could not be written
        """
        output_path = self.path_for(track_name, output_dir)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(text)
        except OSError as e:
            raise MapWriteError(
                f"Could not write {output_path}: {e}",
                file_path=str(output_path),
            )

        self.logger.debug(f"Map written to: {output_path}")
        return output_path


class ReportWriter(ABC):
    """Abstract base class for batch report writers."""

    @abstractmethod
    def write(self, batch_result: BatchResult, output_path: Path) -> None:
        """Write a report of the batch to the specified path."""


class TextReportWriter(ReportWriter):
    """Writes a human-readable batch report."""

    def __init__(self, include_timestamp: bool = True):
        self.include_timestamp = include_timestamp
        self.logger = logging.getLogger("map_writer.text")

    def write(self, batch_result: BatchResult, output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("=" * 70 + "\n")
            f.write("IMUSE MAP GENERATION REPORT\n")
            f.write("=" * 70 + "\n")
            if self.include_timestamp:
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Total Files: {batch_result.total_files}\n")
            f.write(f"Maps Created: {batch_result.success_count}\n")
            f.write(f"Skipped: {batch_result.failure_count}\n")
            f.write("=" * 70 + "\n\n")

            for track in batch_result.successful.values():
                params, plan = track.parameters, track.plan
                bps = params.bytes_per_second
                f.write(f"FILE: {track.source_path.name}\n")
                f.write(f"  Map: {track.map_path}\n")
                f.write(
                    f"  Format: {params.sample_rate} Hz, {params.bits_per_sample}-bit, "
                    f"{params.channel_count} channel(s)\n"
                )
                f.write(f"  Data size: {params.data_size_bytes} bytes\n")
                f.write(
                    f"  Intro: {plan.intro.length_bytes} bytes "
                    f"({segment_seconds(plan.intro.length_bytes, bps)}s)\n"
                )
                f.write(
                    f"  Loop:  {plan.loop.length_bytes} bytes "
                    f"({segment_seconds(plan.loop.length_bytes, bps)}s)\n"
                )
                f.write(
                    f"  Outro: {plan.outro.length_bytes} bytes "
                    f"({segment_seconds(plan.outro.length_bytes, bps)}s)\n"
                )
                if plan.used_fallback:
                    f.write("  Note: proportional segments (short audio)\n")
                f.write("\n")

            if batch_result.failed:
                f.write("Skipped Files:\n")
                for path, error in batch_result.failed.items():
                    f.write(f"  {Path(path).name}: {error}\n")

        self.logger.info(f"Report written to: {output_path}")


class JSONReportWriter(ReportWriter):
    """Writes the batch report as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self.logger = logging.getLogger("map_writer.json")

    def write(self, batch_result: BatchResult, output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_data = {
            "generated": datetime.now().isoformat(),
            "total_files": batch_result.total_files,
            "success_count": batch_result.success_count,
            "failure_count": batch_result.failure_count,
            "total_time": batch_result.total_time,
            "tracks": {
                str(path): track.to_dict()
                for path, track in batch_result.successful.items()
            },
            "failed": {
                str(path): error
                for path, error in batch_result.failed.items()
            },
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=self.indent, default=str)

        self.logger.info(f"Report written to: {output_path}")


def create_report_writer(format: str = "json", **kwargs) -> ReportWriter:
    """
    Factory function to create the report writer for a format.

    Args:
        format: Output format ("text" or "json")
        **kwargs: Additional arguments for the writer
    """
    writers = {
        "text": TextReportWriter,
        "txt": TextReportWriter,
        "json": JSONReportWriter,
    }

    writer_class = writers.get(format.lower())
    if writer_class is None:
        raise ValueError(f"Unknown format: {format}. Supported: {list(writers.keys())}")

    return writer_class(**kwargs)
