"""
Batch processor for generating maps for many audio files.

Files are handled strictly one at a time. A failure on one file is
recorded and the batch moves on; only a missing dependency stops the run.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from impgen.core.map_writer import ImpFileWriter
from impgen.core.models import ProcessedTrack
from impgen.core.probe import AudioProbe, probe_file
from impgen.core.segments import plan_for
from impgen.core.serializer import serialize
from impgen.utils.errors import (
    DependencyMissingError,
    ImpGenError,
    MapWriteError,
    MissingDurationError,
    SegmentConsistencyError,
    UnreadableAudioError,
)
from impgen.utils.logging import create_logger_with_context


DEFAULT_EXTENSIONS = (".wav",)

PER_FILE_ERRORS = (
    UnreadableAudioError,
    MissingDurationError,
    SegmentConsistencyError,
    MapWriteError,
)


@dataclass
class BatchResult:
    """Result of a batch run."""
    successful: Dict[Path, ProcessedTrack] = field(default_factory=dict)
    failed: Dict[Path, str] = field(default_factory=dict)
    total_files: int = 0
    total_time: float = 0.0

    @property
    def found_any(self) -> bool:
        """Whether any eligible input file was discovered."""
        return self.total_files > 0

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total_files == 0:
            return 0.0
        return (self.success_count / self.total_files) * 100


class BatchProcessor:
    """
    Runs probe, segment calculation, serialization and writing per file.

    The probe is injected so the same batch logic drives either backend.
    """

    def __init__(
        self,
        probe: AudioProbe,
        output_dir: Optional[Path] = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        writer: Optional[ImpFileWriter] = None,
        progress_callback: Optional[Callable[[int, int, Path], None]] = None,
        result_callback: Optional[Callable[[ProcessedTrack], None]] = None,
        failure_callback: Optional[Callable[[Path, ImpGenError], None]] = None,
    ):
        """
        Initialize batch processor.

        Args:
            probe: Audio probe backend
            output_dir: Directory for map files (None: next to each input)
            extensions: Eligible file extensions, matched case-insensitively
            writer: Map file writer
            progress_callback: Optional callback(current, total, file_path)
            result_callback: Optional callback(track) after each created map
            failure_callback: Optional callback(file_path, error) for skipped files
        """
        self.probe = probe
        self.output_dir = Path(output_dir) if output_dir else None
        self.extensions = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
        self.writer = writer or ImpFileWriter()
        self.progress_callback = progress_callback
        self.result_callback = result_callback
        self.failure_callback = failure_callback
        self.logger = logging.getLogger("batch_processor")

    def process(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool = False
    ) -> BatchResult:
        """
        Process one or more audio files or directories.

        Args:
            inputs: Single path or list of paths (files or directories)
            recursive: If True, search directories recursively

        Returns:
            BatchResult with created maps and skipped files
        """
        start_time = time.time()

        files = self.collect_files(inputs, recursive)

        if not files:
            self.logger.warning("No eligible audio files found to process")
            return BatchResult(total_files=0, total_time=0.0)

        self.logger.info(f"Processing {len(files)} audio files")

        result = BatchResult(total_files=len(files))
        for index, file_path in enumerate(files, start=1):
            if self.progress_callback:
                self.progress_callback(index, len(files), file_path)
            self._process_one(file_path, result)

        result.total_time = time.time() - start_time
        self.logger.info(
            f"Batch complete: {result.success_count}/{result.total_files} maps created "
            f"in {result.total_time:.2f}s"
        )
        return result

    def collect_files(
        self,
        inputs: Union[Path, List[Path]],
        recursive: bool = False
    ) -> List[Path]:
        """Collect eligible audio files from inputs, deduplicated and sorted."""
        if isinstance(inputs, (str, Path)):
            inputs = [inputs]

        files = []
        for path in inputs:
            path = Path(path)
            if path.is_file():
                if self.is_eligible(path):
                    files.append(path)
                else:
                    self.logger.warning(f"Skipping non-audio file: {path}")
            elif path.is_dir():
                files.extend(self._scan_directory(path, recursive))
            else:
                self.logger.warning(f"Path not found: {path}")

        return sorted(set(files))

    def _scan_directory(self, directory: Path, recursive: bool) -> List[Path]:
        pattern = "**/*" if recursive else "*"
        return [
            path for path in directory.glob(pattern)
            if path.is_file() and self.is_eligible(path)
        ]

    def is_eligible(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def process_file(self, file_path: Path) -> ProcessedTrack:
        """
        Generate the map for a single file.

        Raises:
            UnreadableAudioError, MissingDurationError,
            SegmentConsistencyError, MapWriteError: The file is skipped
            DependencyMissingError: The probe backend disappeared mid-run
        """
        started = time.time()
        track_name = file_path.stem
        log = create_logger_with_context("impgen.batch", {"file": file_path.name})

        parameters = probe_file(self.probe, file_path)
        log.debug(
            f"{parameters.sample_rate} Hz, {parameters.bits_per_sample}-bit, "
            f"{parameters.channel_count} ch, {parameters.duration_in_samples} samples"
        )

        plan = plan_for(parameters, track_name)
        text = serialize(plan)

        output_dir = self.output_dir or file_path.parent
        map_path = self.writer.write(track_name, text, output_dir)
        log.info(f"created {map_path.name}")

        track = ProcessedTrack(
            source_path=file_path,
            track_name=track_name,
            parameters=parameters,
            plan=plan,
            map_path=map_path,
            processing_time=time.time() - started,
        )
        if plan.used_fallback:
            track.notes.append("short audio file, proportional segments used")
        return track

    def _process_one(self, file_path: Path, result: BatchResult) -> None:
        # The failure callback reports skipped files itself
        skip_level = logging.DEBUG if self.failure_callback else logging.ERROR
        try:
            track = self.process_file(file_path)
        except DependencyMissingError:
            raise
        except SegmentConsistencyError as e:
            self.logger.critical(
                f"{file_path.name}: {e.message}. This indicates a bug in the segment "
                f"calculation; no map was written."
            )
            self._record_failure(file_path, e, result)
            return
        except PER_FILE_ERRORS as e:
            self.logger.log(skip_level, f"Skipping {file_path.name}: {e.message}")
            self._record_failure(file_path, e, result)
            return
        except Exception as e:
            error = ImpGenError(
                f"Failed to process {file_path.name}: {e}",
                details={"error_type": type(e).__name__},
            )
            self.logger.log(skip_level, error.message, exc_info=True)
            self._record_failure(file_path, error, result)
            return

        result.successful[file_path] = track
        if self.result_callback:
            self.result_callback(track)

    def _record_failure(self, file_path: Path, error: ImpGenError, result: BatchResult) -> None:
        result.failed[file_path] = error.message
        if self.failure_callback:
            self.failure_callback(file_path, error)
