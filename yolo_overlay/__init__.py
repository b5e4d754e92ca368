"""Real-time YOLO object detection overlay."""

from yolo_overlay.pipeline import (
    Box,
    Detection,
    DetectorState,
    Frame,
    ModelConfig,
    PixelFormat,
    SessionPhase,
)
from yolo_overlay.yolo import (
    LoopController,
    OverlayRenderer,
    decode_output,
    preprocess,
    run_overlay,
    scale_detections,
)


__all__ = [
    "Box",
    "Detection",
    "DetectorState",
    "Frame",
    "LoopController",
    "ModelConfig",
    "OverlayRenderer",
    "PixelFormat",
    "SessionPhase",
    "decode_output",
    "preprocess",
    "run_overlay",
    "scale_detections",
]
