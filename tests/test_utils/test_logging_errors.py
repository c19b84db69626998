"""Tests for logging utilities and the error hierarchy."""

import json
import logging

import pytest

from impgen.utils.errors import (
    ConfigurationError,
    DependencyMissingError,
    ImpGenError,
    MissingDurationError,
    SegmentConsistencyError,
    UnreadableAudioError,
)
from impgen.utils.logging import (
    ColoredFormatter,
    JSONFormatter,
    create_logger_with_context,
    setup_logging,
)


@pytest.fixture
def root_logger():
    return logging.getLogger()


def _record(msg="hello", level=logging.INFO, **attrs):
    record = logging.LogRecord("impgen.test", level, __file__, 10, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter(self):
        data = json.loads(JSONFormatter().format(_record(context={"file": "A.wav"})))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["logger"] == "impgen.test"
        assert data["context"] == {"file": "A.wav"}

    def test_colored_formatter_restores_levelname(self):
        record = _record(level=logging.WARNING)

        text = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[33m" in text
        assert record.levelname == "WARNING"


class TestContextLogger:
    def test_prefixes_message_and_sets_context(self, caplog):
        log = create_logger_with_context("impgen.batch", {"file": "AMBIENT1.wav"})

        with caplog.at_level(logging.INFO, logger="impgen.batch"):
            log.info("created AMBIENT1.imp")

        record = caplog.records[-1]
        assert record.getMessage() == "[file=AMBIENT1.wav] created AMBIENT1.imp"
        assert record.context == {"file": "AMBIENT1.wav"}


class TestSetupLogging:
    def test_file_handler_writes_json(self, tmp_path, root_logger):
        log_file = tmp_path / "logs" / "impgen.log"

        setup_logging(level="DEBUG", log_format="text", log_file=str(log_file),
                      console_enabled=False)
        logging.getLogger("impgen.test").debug("probing")
        for handler in root_logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "probing"

    def test_level_applied(self, root_logger):
        setup_logging(level="warning", console_enabled=False)

        assert root_logger.level == logging.WARNING


class TestErrors:
    def test_hierarchy(self):
        for error in (
            DependencyMissingError("ffprobe"),
            UnreadableAudioError("bad", file_path="A.wav"),
            MissingDurationError("no duration"),
            SegmentConsistencyError(expected=10, actual=9),
            ConfigurationError("bad config"),
        ):
            assert isinstance(error, ImpGenError)

    def test_str_includes_details(self):
        error = UnreadableAudioError("Could not analyze A.wav", file_path="A.wav")

        assert str(error) == "Could not analyze A.wav (Details: {'file_path': 'A.wav'})"
        assert error.message == "Could not analyze A.wav"

    def test_str_without_details(self):
        assert str(ImpGenError("plain")) == "plain"

    def test_dependency_missing(self):
        error = DependencyMissingError("ffprobe (from ffmpeg)", install_hint="brew install ffmpeg")

        assert "ffprobe (from ffmpeg) is required" in error.message
        assert error.install_hint == "brew install ffmpeg"

    def test_consistency_error_values(self):
        error = SegmentConsistencyError(expected=2_000_000, actual=1_999_999, track_name="X")

        assert "2000000" in error.message
        assert "1999999" in error.message
        assert error.details["track_name"] == "X"
