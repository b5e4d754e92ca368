"""Frame capture backends for the overlay pipeline."""

from __future__ import annotations

from yolo_overlay.pipeline.capture.core import CameraCapture, CaptureProtocol
from yolo_overlay.pipeline.capture.opencv import OpenCVCapture


__all__ = [
    "CameraCapture",
    "CaptureProtocol",
    "OpenCVCapture",
]
