from __future__ import annotations

from yolo_overlay.pipeline.capture import CameraCapture, OpenCVCapture
from yolo_overlay.pipeline.errors import (
    CaptureAcquisitionFailure,
    InvalidTransition,
    MalformedOutput,
    ModelLoadFailure,
    OverlayError,
)
from yolo_overlay.pipeline.logging import (
    attach_log_buffer,
    configure_logging,
    create_log_buffer,
)
from yolo_overlay.pipeline.metrics.performance import (
    PerformanceTracker,
    ThroughputMeter,
)
from yolo_overlay.pipeline.types import (
    Box,
    CameraConfig,
    Detection,
    DetectorState,
    Frame,
    ModelConfig,
    PerformanceMetrics,
    PixelFormat,
    SessionPhase,
)


__all__ = [
    "Box",
    "CameraCapture",
    "CameraConfig",
    "CaptureAcquisitionFailure",
    "Detection",
    "DetectorState",
    "Frame",
    "InvalidTransition",
    "MalformedOutput",
    "ModelConfig",
    "ModelLoadFailure",
    "OpenCVCapture",
    "OverlayError",
    "PerformanceMetrics",
    "PerformanceTracker",
    "PixelFormat",
    "SessionPhase",
    "ThroughputMeter",
    "attach_log_buffer",
    "configure_logging",
    "create_log_buffer",
]
