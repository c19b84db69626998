"""
impgen - iMUSE map generator CLI

Generates .imp files for X-Wing Alliance looping music. Each map tells
the VIMA compressor where a track's intro, loop and outro lie.

Example usage:
    # All WAV files in the current directory
    impgen

    # Specific files or directories
    impgen music/FRCONCOURSE.wav
    impgen --recursive music/
    impgen --output-dir maps/ --report report.json music/

    # Probe headers with libsndfile instead of ffprobe
    impgen --probe soundfile music/
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from impgen import __version__
from impgen.core.batch_processor import BatchProcessor, BatchResult
from impgen.core.map_writer import create_report_writer
from impgen.core.models import ProcessedTrack
from impgen.core.probe import check_dependencies, create_probe
from impgen.core.segments import segment_seconds
from impgen.utils.config import PROBE_BACKENDS, load_config
from impgen.utils.errors import (
    ConfigurationError,
    DependencyMissingError,
    ImpGenError,
    SegmentConsistencyError,
)
from impgen.utils.logging import setup_logging


NEXT_STEPS = """Next steps:
1. Open VIMA Audio Compressor
2. CHECK 'Create Default TEXT blocks' (important for looping)
3. UNCHECK 'Lossless' (use lossy compression)
4. Add your WAV file and its .imp file, then compress
5. Test the .IMC file in-game

Notes:
- For infinite looping: Edit 'Loop = 500' to 'Loop = 9999' in .imp files
- For non-looping music: Skip the .imp file, just compress the WAV
- If timing feels wrong: Try analyzing similar original tracks with SCUMM Revisited"""


def print_progress(current: int, total: int, file_path: Path) -> None:
    """Print progress updates."""
    print(f"[{current}/{total}] Processing {file_path.name}...")


def print_track_report(track: ProcessedTrack) -> None:
    """Print the format, duration and segment layout of a created map."""
    params, plan = track.parameters, track.plan
    bps = params.bytes_per_second
    intro_s = segment_seconds(plan.intro.length_bytes, bps)
    loop_s = segment_seconds(plan.loop.length_bytes, bps)
    outro_s = segment_seconds(plan.outro.length_bytes, bps)

    print(
        f"  Audio format: {params.sample_rate} Hz, {params.bits_per_sample}-bit, "
        f"{params.channel_count} channel(s)"
    )
    print(f"  Duration: {params.duration_seconds} seconds ({params.duration_in_samples} samples)")
    print(f"  Bytes per second: {bps}")
    print(f"  Total data size: {params.data_size_bytes} bytes")
    if plan.used_fallback:
        print("    Warning: Short audio file detected, using proportional segments "
              "instead of 6-second pattern")
    print("  Calculated segments:")
    print(f"    REGN1 (intro): {plan.intro.length_bytes} bytes = {intro_s}s")
    print(f"    REGN2 (loop):  {plan.loop.length_bytes} bytes = {loop_s}s")
    print(f"    REGN3 (outro): {plan.outro.length_bytes} bytes = {outro_s}s")
    print(f"  Created {track.map_path.name} for looping music")
    print(f"    Intro: {intro_s}s -> Loop: {loop_s}s -> Outro: {outro_s}s")
    print()


def print_failure(file_path: Path, error: ImpGenError) -> None:
    """Print why a file was skipped."""
    if isinstance(error, SegmentConsistencyError):
        print(f"  ERROR: {error.message}")
        print("    This indicates a bug in the segment calculation. No map was written.")
    else:
        print(f"  Warning: {error.message}, skipping...")
    print()


def print_summary(batch_result: BatchResult) -> None:
    """Print the batch summary."""
    print("=" * 60)
    print(f"Maps created: {batch_result.success_count}/{batch_result.total_files}")
    if batch_result.failed:
        print("\nSkipped files:")
        for path, error in batch_result.failed.items():
            print(f"  {path.name}: {error}")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="impgen",
        description="Generate iMUSE map (.imp) files for X-Wing Alliance looping music",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=NEXT_STEPS,
    )
    parser.add_argument(
        "inputs",
        type=Path,
        nargs="*",
        help="Audio file(s) or directories (default: current directory)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Directory for .imp files (default: next to each input)"
    )
    parser.add_argument(
        "--probe",
        choices=PROBE_BACKENDS,
        default=None,
        help="Audio probe backend (default: ffprobe)"
    )
    parser.add_argument(
        "--recursive",
        "-r",
        action="store_true",
        help="Search directories recursively"
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a batch report (.json for JSON, anything else for text)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"impgen {__version__}"
    )
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run the generator.

    Returns:
        Exit code: 1 if no eligible input was found, a dependency is
        missing or the configuration is invalid; 0 otherwise
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(str(args.config) if args.config else None)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    if args.probe:
        config.set("probe.backend", args.probe)
    if args.output_dir:
        config.set("output.directory", str(args.output_dir))
    if args.recursive:
        config.set("input.recursive", True)

    log_level = "DEBUG" if args.verbose else config.get("logging.level", "INFO")
    setup_logging(
        level=log_level,
        log_format=config.get("logging.format", "text"),
        log_file=config.get("logging.file"),
        colored=sys.stderr.isatty(),
    )

    try:
        probe = create_probe(config.get_section("probe"))
        check_dependencies(probe)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1
    except DependencyMissingError as e:
        print(f"Error: {e.message}")
        if e.install_hint:
            print(e.install_hint)
        return 1

    output_dir = config.get("output.directory")
    extensions = config.get("input.extensions", [".wav"])
    processor = BatchProcessor(
        probe=probe,
        output_dir=Path(output_dir) if output_dir else None,
        extensions=extensions,
        progress_callback=print_progress,
        result_callback=print_track_report,
        failure_callback=print_failure,
    )

    inputs = args.inputs or [Path.cwd()]
    try:
        batch_result = processor.process(inputs, recursive=bool(config.get("input.recursive", False)))
    except DependencyMissingError as e:
        print(f"Error: {e.message}")
        return 1

    if not batch_result.found_any:
        print(f"No audio files ({', '.join(extensions)}) found.")
        return 1

    print_summary(batch_result)

    if args.report:
        report_format = "json" if args.report.suffix.lower() == ".json" else "text"
        try:
            create_report_writer(report_format).write(batch_result, args.report)
        except OSError as e:
            print(f"Error: could not write report to {args.report}: {e}")
        else:
            print(f"Report saved to: {args.report}")

    print("\nDone! Generated .imp files for looping music.\n")
    print(NEXT_STEPS)
    return 0


def main():
    """Main entry point for the impgen command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
