"""Unit tests for loguru configuration helpers."""

from __future__ import annotations

from loguru import logger

from yolo_overlay.pipeline.logging import (
    attach_log_buffer,
    configure_logging,
    create_log_buffer,
)


class TestLogBuffer:
    """Tests for the bounded log buffer sink."""

    def test_buffer_is_bounded(self) -> None:
        buffer = create_log_buffer(max_lines=2)
        sink_id = attach_log_buffer(buffer, level="INFO")
        try:
            for i in range(3):
                logger.info("message {}", i)
        finally:
            logger.remove(sink_id)

        assert len(buffer) == 2
        assert buffer[-1].endswith("message 2")
        assert "INFO" in buffer[0]

    def test_level_filtering(self) -> None:
        buffer = create_log_buffer()
        sink_id = attach_log_buffer(buffer, level="WARNING")
        try:
            logger.info("quiet")
            logger.warning("loud")
        finally:
            logger.remove(sink_id)

        assert len(buffer) == 1
        assert buffer[0].endswith("loud")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_log_files(self, tmp_path) -> None:
        configure_logging("DEBUG", str(tmp_path), json_logs=True)
        logger.debug("to file")
        logger.complete()
        configure_logging("INFO", None)

        assert list(tmp_path.glob("overlay_*.log"))
        assert list(tmp_path.glob("overlay_*.jsonl"))

    def test_environment_overrides_level(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("YOLO_OVERLAY_LOG_LEVEL", "error")
        configure_logging("DEBUG", None)
        logger.warning("hidden")
        logger.error("shown")

        out = capsys.readouterr().out
        assert "shown" in out
        assert "hidden" not in out

    def test_unknown_environment_level_is_ignored(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("YOLO_OVERLAY_LOG_LEVEL", "chatty")
        configure_logging("INFO", None)
        logger.debug("hidden")
        logger.info("shown")

        out = capsys.readouterr().out
        assert "Ignoring unknown YOLO_OVERLAY_LOG_LEVEL='chatty'" in out
        assert "shown" in out
        assert "hidden" not in out

    def test_empty_log_dir_writes_no_files(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        configure_logging("INFO", "")
        logger.info("console only")

        assert list(tmp_path.iterdir()) == []
