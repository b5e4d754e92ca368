"""Shared data structures for the detection overlay pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


DEFAULT_CLASS_NAMES: tuple[str, ...] = (
    "controller",
    "ac_adaptor",
    "bat_charger",
    "battery",
)


class PixelFormat(Enum):
    """Channel layout of a captured frame."""

    RGBA = "rgba"
    RGB = "rgb"
    BGR = "bgr"
    BGRA = "bgra"

    @property
    def rgb_indices(self) -> tuple[int, int, int]:
        """Return the channel indices holding red, green and blue."""
        if self in (PixelFormat.RGBA, PixelFormat.RGB):
            return (0, 1, 2)
        return (2, 1, 0)


@dataclass
class Frame:
    """One raster image handed over by a capture source."""

    pixels: np.ndarray
    pixel_format: PixelFormat = PixelFormat.BGR

    @property
    def width(self) -> int:
        """Frame width in pixels."""
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        """Frame height in pixels."""
        return int(self.pixels.shape[0])


@dataclass(frozen=True)
class Box:
    """Corner-form box: top-left corner plus size."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Detection:
    """A decoded detection in model-input or display space."""

    box: Box
    class_id: int
    confidence: float
    class_name: str


@dataclass(frozen=True)
class ModelConfig:
    """Constants tied to the detection model in use."""

    input_size: int = 640
    num_candidates: int = 8400
    num_classes: int = 8
    conf_threshold: float = 0.5
    class_names: tuple[str, ...] = DEFAULT_CLASS_NAMES
    input_name: str = "images"
    output_name: str = "output0"
    nms_iou_threshold: float | None = None

    def __post_init__(self) -> None:
        """Reject configurations the decoder cannot honor."""
        if self.input_size <= 0:
            message = f"input_size must be positive, got {self.input_size}"
            raise ValueError(message)
        if self.num_candidates <= 0:
            message = f"num_candidates must be positive, got {self.num_candidates}"
            raise ValueError(message)
        if self.num_classes <= 0:
            message = f"num_classes must be positive, got {self.num_classes}"
            raise ValueError(message)
        if not 0.0 <= self.conf_threshold <= 1.0:
            message = f"conf_threshold must be in [0, 1], got {self.conf_threshold}"
            raise ValueError(message)
        if self.nms_iou_threshold is not None and not (
            0.0 < self.nms_iou_threshold <= 1.0
        ):
            message = (
                f"nms_iou_threshold must be in (0, 1], got {self.nms_iou_threshold}"
            )
            raise ValueError(message)

    @property
    def output_length(self) -> int:
        """Number of floats in one raw model output."""
        return (4 + self.num_classes) * self.num_candidates


@dataclass
class CameraConfig:
    """Camera configuration settings."""

    source: int | str = 0
    width: int = 640
    height: int = 480
    fps: int = 30


class SessionPhase(Enum):
    """Lifecycle phases of a detection session."""

    IDLE = "idle"
    MODEL_LOADING = "model_loading"
    READY = "ready"
    DETECTING = "detecting"


@dataclass
class DetectorState:
    """Mutable session state owned by the loop controller."""

    phase: SessionPhase = SessionPhase.IDLE
    model_ready: bool = False
    model_failed: bool = False
    running: bool = False
    frame_count: int = 0
    window_start: float = 0.0
    fps: int = 0
    last_detection_count: int = 0


@dataclass
class PerformanceMetrics:
    """Container for performance metrics."""

    fps: float = 0.0
    inference_ms: float = 0.0
    frame_budget_percent: float = 0.0
    total_cycles: int = 0
