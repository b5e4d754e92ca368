"""Unit tests for the overlay entry point helpers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from loguru import logger

from yolo_overlay.pipeline.errors import ModelLoadFailure
from yolo_overlay.pipeline.types import ModelConfig
from yolo_overlay.yolo import monitor


def _capture_warnings() -> tuple[list[str], int]:
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="WARNING", format="{message}")
    return messages, sink_id


class _FailingBackend:
    def __init__(self, *_args: object, **_kwargs: object) -> None:
        self.input_shape = None
        self.output_shape = None

    async def load(self) -> None:
        message = "Failed to load model best.onnx"
        raise ModelLoadFailure(message)


class TestCheckModelLayout:
    """Tests for the model layout sanity check."""

    def test_matching_layout_is_quiet(self) -> None:
        backend = SimpleNamespace(
            input_shape=[1, 3, 640, 640], output_shape=[1, 12, 8400]
        )
        messages, sink_id = _capture_warnings()
        try:
            monitor._check_model_layout(backend, ModelConfig())
        finally:
            logger.remove(sink_id)

        assert messages == []

    def test_mismatch_warns(self) -> None:
        backend = SimpleNamespace(
            input_shape=[1, 3, 320, 320], output_shape=[1, 84, 2100]
        )
        messages, sink_id = _capture_warnings()
        try:
            monitor._check_model_layout(backend, ModelConfig())
        finally:
            logger.remove(sink_id)

        assert len(messages) == 2
        assert "320" in messages[0]
        assert "80 classes x 2100 candidates" in messages[1]

    def test_dynamic_shapes_are_skipped(self) -> None:
        backend = SimpleNamespace(
            input_shape=[1, 3, "h", "w"], output_shape=["batch", 12, "n"]
        )
        messages, sink_id = _capture_warnings()
        try:
            monitor._check_model_layout(backend, ModelConfig())
        finally:
            logger.remove(sink_id)

        assert messages == []


class TestRunOverlay:
    """Tests for run_overlay exit codes."""

    @patch("yolo_overlay.yolo.monitor.configure_logging")
    def test_invalid_configuration(self, _mock_logging) -> None:
        assert monitor.run_overlay(["--conf", "2", "--no-display"]) == 2

    @patch("yolo_overlay.yolo.monitor.configure_logging")
    @patch("yolo_overlay.yolo.monitor.CameraCapture")
    @patch("yolo_overlay.yolo.monitor.OnnxInferenceBackend", _FailingBackend)
    def test_model_load_failure(self, mock_camera_cls, _mock_logging) -> None:
        camera = MagicMock()
        mock_camera_cls.return_value = camera

        assert monitor.run_overlay(["--no-display"]) == 1
        camera.open.assert_not_called()
        camera.release.assert_called_once()

    @patch("yolo_overlay.yolo.monitor.configure_logging")
    @patch("yolo_overlay.yolo.monitor.CameraCapture")
    @patch("yolo_overlay.yolo.monitor.OnnxInferenceBackend")
    def test_capture_failure(
        self, mock_backend_cls, mock_camera_cls, _mock_logging
    ) -> None:
        async def _load() -> None:
            return None

        backend = mock_backend_cls.return_value
        backend.load.side_effect = _load
        backend.input_shape = [1, 3, 640, 640]
        backend.output_shape = [1, 12, 8400]
        camera = mock_camera_cls.return_value
        camera.open.return_value = False

        assert monitor.run_overlay(["--no-display"]) == 1
        camera.open.assert_called_once()
