"""Capture orchestration helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from loguru import logger

from yolo_overlay.pipeline.capture.opencv import OpenCVCapture


if TYPE_CHECKING:
    from yolo_overlay.pipeline.types import CameraConfig, Frame


class CaptureProtocol(Protocol):
    """Protocol for frame sources driven by the loop controller."""

    def open(self) -> bool:
        """Open the source, returning False when it is unavailable."""
        ...

    def read(self) -> tuple[bool, Frame | None]:
        """Read the current frame from the source."""
        ...

    def release(self) -> None:
        """Release the source and any underlying device."""
        ...

    def is_opened(self) -> bool:
        """Return True when the source is open."""
        ...

    def get_info(self) -> dict:
        """Return source metadata; must include ``width`` and ``height``."""
        ...


class CameraCapture:
    """Camera capture facade over the OpenCV backend."""

    def __init__(self, config: CameraConfig) -> None:
        """Create a capture wrapper for ``config``."""
        self.config = config
        self._capture: CaptureProtocol | None = None
        self.backend_name = ""

    def open(self) -> bool:
        """Open the capture backend."""
        self._capture = OpenCVCapture(self.config)
        if self._capture.open():
            self.backend_name = "OpenCV"
            return True

        logger.warning("No capture backend could open {}", self.config.source)
        self._capture = None
        return False

    def read(self) -> tuple[bool, Frame | None]:
        """Read a frame from the active backend."""
        if self._capture is None:
            return False, None
        return self._capture.read()

    def release(self) -> None:
        """Release the active backend."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def is_opened(self) -> bool:
        """Return True if the active backend is open."""
        return self._capture is not None and self._capture.is_opened()

    def get_info(self) -> dict:
        """Return backend metadata for diagnostics."""
        if self._capture is not None:
            return self._capture.get_info()
        return {"backend": "None", "source": "", "width": 0, "height": 0, "fps": 0}
