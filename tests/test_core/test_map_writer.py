"""Tests for map file and report writers."""

import json

import pytest

from impgen.core.batch_processor import BatchResult
from impgen.core.map_writer import (
    ImpFileWriter,
    JSONReportWriter,
    TextReportWriter,
    create_report_writer,
)
from impgen.core.models import AudioParameters, ProcessedTrack
from impgen.core.segments import compute_segments
from impgen.utils.errors import MapWriteError


@pytest.fixture
def batch_result(tmp_path):
    params = AudioParameters(44100, 16, 2, 2_500_000, 56.689342)
    source = tmp_path / "AMBIENT1.wav"
    track = ProcessedTrack(
        source_path=source,
        track_name="AMBIENT1",
        parameters=params,
        plan=compute_segments(params.data_size_bytes, params.bytes_per_second, "AMBIENT1"),
        map_path=tmp_path / "AMBIENT1.imp",
    )
    return BatchResult(
        successful={source: track},
        failed={tmp_path / "BROKEN.wav": "Could not determine audio duration for BROKEN.wav"},
        total_files=2,
        total_time=0.25,
    )


class TestImpFileWriter:
    def test_writes_text_verbatim(self, tmp_path):
        path = ImpFileWriter().write("AMBIENT1", "[STOP]\nPosition = 0\n", tmp_path / "maps")

        assert path == tmp_path / "maps" / "AMBIENT1.imp"
        assert path.read_bytes() == b"[STOP]\nPosition = 0\n"

    def test_overwrites_existing_map(self, tmp_path):
        writer = ImpFileWriter()
        writer.write("AMBIENT1", "old\n", tmp_path)
        writer.write("AMBIENT1", "new\n", tmp_path)

        assert (tmp_path / "AMBIENT1.imp").read_text() == "new\n"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(MapWriteError) as exc_info:
            ImpFileWriter().write("AMBIENT1", "text", blocker)

        assert exc_info.value.file_path == str(blocker / "AMBIENT1.imp")


class TestReportWriters:
    def test_json_report(self, batch_result, tmp_path):
        out = tmp_path / "reports" / "report.json"

        JSONReportWriter().write(batch_result, out)
        data = json.loads(out.read_text(encoding="utf-8"))

        assert data["total_files"] == 2
        assert data["success_count"] == 1
        track = data["tracks"][str(tmp_path / "AMBIENT1.wav")]
        assert track["segments"]["loop"] == {"start_position_bytes": 1_102_500, "length_bytes": 7_839_100}
        assert track["parameters"]["data_size_bytes"] == 10_000_000
        assert list(data["failed"].values()) == ["Could not determine audio duration for BROKEN.wav"]

    def test_text_report(self, batch_result, tmp_path):
        out = tmp_path / "report.txt"

        TextReportWriter(include_timestamp=False).write(batch_result, out)
        text = out.read_text(encoding="utf-8")

        assert "FILE: AMBIENT1.wav" in text
        assert "Loop:  7839100 bytes (44.439s)" in text
        assert "BROKEN.wav: Could not determine audio duration" in text
        assert "Generated:" not in text

    def test_factory(self):
        assert isinstance(create_report_writer("json"), JSONReportWriter)
        assert isinstance(create_report_writer("TXT"), TextReportWriter)
        with pytest.raises(ValueError):
            create_report_writer("xml")
