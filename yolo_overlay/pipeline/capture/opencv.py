"""OpenCV frame source for camera devices, video files and stream URLs."""

from __future__ import annotations

from contextlib import suppress
from typing import TYPE_CHECKING

import cv2
from loguru import logger

from yolo_overlay.pipeline.types import Frame, PixelFormat


if TYPE_CHECKING:
    import numpy as np

    from yolo_overlay.pipeline.types import CameraConfig


def to_frame(pixels: np.ndarray) -> Frame:
    """Wrap a decoded OpenCV image, widening grayscale to BGR."""
    if pixels.ndim == 2:
        return Frame(cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR), PixelFormat.BGR)
    if pixels.shape[2] == 4:
        return Frame(pixels, PixelFormat.BGRA)
    return Frame(pixels, PixelFormat.BGR)


class OpenCVCapture:
    """Frame source backed by ``cv2.VideoCapture``.

    Integer sources are treated as devices and get the configured resolution
    and rate requested. Files and URLs are read as they are; when such a
    source does not report its frame size, the first frame is decoded at open
    time to measure it and is handed out by the next ``read()``.
    """

    def __init__(self, config: CameraConfig) -> None:
        self.config = config
        self.cap: cv2.VideoCapture | None = None
        self.frame_size = (0, 0)
        self.source_fps = 0.0
        self._pending: Frame | None = None

    def _configure_device(self) -> None:
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        # not every driver honours a one-frame buffer
        with suppress(Exception):
            self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

    def _measure_from_first_frame(self) -> None:
        ok, pixels = self.cap.read()
        if not ok or pixels is None:
            logger.warning(
                "Source {} did not deliver a first frame", self.config.source
            )
            return
        self._pending = to_frame(pixels)
        self.frame_size = (self._pending.width, self._pending.height)

    def open(self) -> bool:
        """Open the source; returns False when OpenCV cannot open it."""
        source = self.config.source
        logger.info("Opening capture source {} with OpenCV...", source)

        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            logger.error("Cannot open capture source {}", source)
            self.cap = None
            return False

        if isinstance(source, int):
            self._configure_device()

        self.frame_size = (
            int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        self.source_fps = float(self.cap.get(cv2.CAP_PROP_FPS))
        if min(self.frame_size) <= 0:
            self._measure_from_first_frame()

        width, height = self.frame_size
        logger.success(
            "Capture opened: {}x{} @ {:.1f} FPS", width, height, self.source_fps
        )
        return True

    def read(self) -> tuple[bool, Frame | None]:
        if self.cap is None:
            return False, None
        if self._pending is not None:
            frame, self._pending = self._pending, None
            return True, frame
        ok, pixels = self.cap.read()
        if not ok or pixels is None:
            return False, None
        return True, to_frame(pixels)

    def release(self) -> None:
        self._pending = None
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def is_opened(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def get_info(self) -> dict:
        """Return source metadata; width and height are the delivered frame size."""
        width, height = self.frame_size
        return {
            "backend": "OpenCV",
            "source": str(self.config.source),
            "width": width,
            "height": height,
            "fps": self.source_fps,
        }
