"""
Map serializer for the VIMA compressor's .imp input.

Block and field order are fixed; the compressor reads them positionally.
Positions are relative to the start of the audio data; the compressor
adds its own base offset.
"""

from typing import List

from impgen.core.models import MapBlock, MusicMap, SegmentPlan


MAP_HEADER = "iMUSE Map"
MAP_VERSION = 1
LOOP_MARKER_TEXT = "lp"
JUMP_ID = 0

# Users raise this to 9999 by hand for an effectively infinite loop
DEFAULT_LOOP_COUNT = 500


def build_music_map(plan: SegmentPlan) -> MusicMap:
    """Lay a segment plan out as iMUSE map blocks."""
    intro, loop, outro = plan.intro, plan.loop, plan.outro

    return MusicMap(blocks=(
        MapBlock(MAP_HEADER, (("Version", MAP_VERSION),)),
        MapBlock("FRMT", (("Position", 0), ("Unknown", 1))),
        MapBlock("REGN1", (
            ("Position", intro.start_position_bytes),
            ("Length", intro.length_bytes),
        )),
        MapBlock("TEXT3", (
            ("Position", loop.start_position_bytes),
            ("Text", LOOP_MARKER_TEXT),
        )),
        MapBlock("REGN2", (
            ("Position", loop.start_position_bytes),
            ("Length", loop.length_bytes),
        )),
        MapBlock("JUMP1", (
            ("Position", outro.start_position_bytes),
            ("JumpDest", loop.start_position_bytes),
            ("ID", JUMP_ID),
            ("Loop", DEFAULT_LOOP_COUNT),
        )),
        MapBlock("REGN3", (
            ("Position", outro.start_position_bytes),
            ("Length", outro.length_bytes),
        )),
        MapBlock("STOP", (("Position", plan.stop_position),)),
    ))


def render(music_map: MusicMap) -> str:
    """Render a map as ``[NAME]`` blocks of ``Key = Value`` lines, blank-line separated."""
    chunks: List[str] = []
    for block in music_map.blocks:
        lines = [f"[{block.name}]"]
        lines.extend(f"{key} = {value}" for key, value in block.fields)
        chunks.append("\n".join(lines))
    return "\n\n".join(chunks) + "\n"


def serialize(plan: SegmentPlan) -> str:
    """Serialize a segment plan into .imp text."""
    return render(build_music_map(plan))
