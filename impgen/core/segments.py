"""
Segment calculator for iMUSE looping music.

Splits the raw audio data of a track into an intro, a loop body and an
outro. The split follows the pattern measured on the original
FRCONCOURSE map: an outro of about 6 seconds, an intro of 6 seconds
plus a short extra allowance, and the loop taking everything else.
Very short clips fall back to a proportional 10% / 80% / 10% split.

Every seconds-to-bytes conversion is truncated toward zero on its own,
so rounding error only ever ends up in the loop length.
"""

import logging
from decimal import Decimal
from typing import Optional

from impgen.core.models import AudioParameters, Segment, SegmentPlan
from impgen.utils.errors import SegmentConsistencyError


BASE_SECONDS = Decimal(6)
DEFAULT_INTRO_EXTRA_SECONDS = Decimal("0.25")

# Measured on the shipped FRCONCOURSE map (6.32 s intro); exact name only
FRCONCOURSE_TRACK = "FRCONCOURSE"
FRCONCOURSE_INTRO_EXTRA_SECONDS = Decimal("0.32")

FALLBACK_DIVISOR = 10

logger = logging.getLogger(__name__)


def _seconds_to_bytes(bytes_per_second: int, seconds: Decimal) -> int:
    # int() on a Decimal truncates toward zero
    return int(Decimal(bytes_per_second) * seconds)


def intro_extra_seconds(track_name: str) -> Decimal:
    """Extra intro allowance, in seconds, for the given track name."""
    if track_name.casefold() == FRCONCOURSE_TRACK.casefold():
        return FRCONCOURSE_INTRO_EXTRA_SECONDS
    return DEFAULT_INTRO_EXTRA_SECONDS


def compute_segments(
    data_size_bytes: int,
    bytes_per_second: int,
    track_name: str,
) -> SegmentPlan:
    """
    Compute the intro/loop/outro byte layout for one track.

    Args:
        data_size_bytes: Total size of the raw audio data
        bytes_per_second: Byte rate of the audio format
        track_name: File name without extension

    Returns:
        SegmentPlan whose segments sum exactly to ``data_size_bytes``

    Raises:
        ValueError: Negative data size or non-positive byte rate
        SegmentConsistencyError: Segment positions do not end at the data size
    """
    if data_size_bytes < 0:
        raise ValueError(f"data_size_bytes must be non-negative, got {data_size_bytes}")
    if bytes_per_second <= 0:
        raise ValueError(f"bytes_per_second must be positive, got {bytes_per_second}")

    base_bytes = _seconds_to_bytes(bytes_per_second, BASE_SECONDS)
    outro_length = base_bytes
    intro_extra_bytes = _seconds_to_bytes(bytes_per_second, intro_extra_seconds(track_name))
    intro_length = base_bytes + intro_extra_bytes
    loop_length = data_size_bytes - intro_length - outro_length

    used_fallback = loop_length < 0
    if used_fallback:
        logger.warning(
            f"{track_name}: audio shorter than the 6-second pattern allows "
            f"({data_size_bytes} bytes), using proportional segments"
        )
        intro_length = data_size_bytes // FALLBACK_DIVISOR
        outro_length = data_size_bytes // FALLBACK_DIVISOR
        loop_length = data_size_bytes - intro_length - outro_length

    intro = Segment(length_bytes=intro_length, start_position_bytes=0)
    loop = Segment(length_bytes=loop_length, start_position_bytes=intro.end_position_bytes)
    outro = Segment(length_bytes=outro_length, start_position_bytes=loop.end_position_bytes)

    plan = SegmentPlan(
        intro=intro,
        loop=loop,
        outro=outro,
        data_size_bytes=data_size_bytes,
        used_fallback=used_fallback,
    )
    verify_plan(plan, track_name)

    logger.debug(
        f"{track_name}: intro={intro_length} loop={loop_length} outro={outro_length} "
        f"(fallback={used_fallback})"
    )
    return plan


def verify_plan(plan: SegmentPlan, track_name: Optional[str] = None) -> None:
    """
    Check the layout invariants of a segment plan.

    Raises:
        SegmentConsistencyError: Segments are not contiguous from 0, a length
                                 is negative, or the stop position differs
                                 from the data size
    """
    segments = (plan.intro, plan.loop, plan.outro)
    contiguous = (
        plan.intro.start_position_bytes == 0
        and plan.loop.start_position_bytes == plan.intro.end_position_bytes
        and plan.outro.start_position_bytes == plan.loop.end_position_bytes
    )
    non_negative = all(segment.length_bytes >= 0 for segment in segments)

    if not contiguous or not non_negative or plan.stop_position != plan.data_size_bytes:
        raise SegmentConsistencyError(
            expected=plan.data_size_bytes,
            actual=plan.stop_position,
            track_name=track_name,
        )


def plan_for(parameters: AudioParameters, track_name: str) -> SegmentPlan:
    """Compute the segment plan for probed audio parameters."""
    return compute_segments(
        parameters.data_size_bytes,
        parameters.bytes_per_second,
        track_name,
    )


def segment_seconds(length_bytes: int, bytes_per_second: int) -> str:
    """Render a byte length as seconds, truncated to three decimals."""
    millis = length_bytes * 1000 // bytes_per_second
    return f"{millis // 1000}.{millis % 1000:03d}"
