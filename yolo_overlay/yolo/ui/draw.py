from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import cv2
import numpy as np

from yolo_overlay.yolo.core.constants import color_for_class, hsl_to_bgr


if TYPE_CHECKING:
    from collections.abc import Sequence

    from yolo_overlay.pipeline.types import Detection


NAMED_COLORS: dict[str, tuple[int, int, int]] = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
}


def _to_bgr(color: str) -> tuple[int, int, int]:
    named = NAMED_COLORS.get(color.lower())
    if named is not None:
        return named
    return hsl_to_bgr(color)


class DrawingSurface(Protocol):
    """2-D drawing primitives in display pixel coordinates."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def resize(self, width: int, height: int) -> None: ...

    def clear(self) -> None: ...

    def stroke_rect(
        self, x: float, y: float, w: float, h: float, color: str, line_width: int
    ) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None: ...

    def fill_text(self, text: str, x: float, y: float, color: str) -> None: ...

    def measure_text(self, text: str) -> float: ...


class OpenCVSurface:
    """Transparent BGRA overlay canvas drawn with OpenCV primitives."""

    def __init__(
        self,
        width: int = 640,
        height: int = 480,
        *,
        font_scale: float = 0.5,
        thickness: int = 1,
    ) -> None:
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale = font_scale
        self.thickness = thickness
        self.canvas = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    def resize(self, width: int, height: int) -> None:
        """Replace the canvas with an empty one of the given size."""
        self.canvas = np.zeros((max(1, height), max(1, width), 4), dtype=np.uint8)

    def clear(self) -> None:
        self.canvas[:] = 0

    def stroke_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        color: str,
        line_width: int = 2,
    ) -> None:
        p1 = (round(x), round(y))
        p2 = (round(x + w), round(y + h))
        cv2.rectangle(self.canvas, p1, p2, (*_to_bgr(color), 255), line_width)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        # cv2.rectangle includes the end point
        p1 = (round(x), round(y))
        p2 = (round(x + w) - 1, round(y + h) - 1)
        cv2.rectangle(self.canvas, p1, p2, (*_to_bgr(color), 255), -1)

    def fill_text(self, text: str, x: float, y: float, color: str) -> None:
        cv2.putText(
            self.canvas,
            text,
            (round(x), round(y)),
            self.font,
            self.font_scale,
            (*_to_bgr(color), 255),
            self.thickness,
            cv2.LINE_AA,
        )

    def measure_text(self, text: str) -> float:
        (tw, _th), _ = cv2.getTextSize(text, self.font, self.font_scale, self.thickness)
        return float(tw)

    def composite(self, image: np.ndarray) -> np.ndarray:
        """Blend the overlay onto a BGR image of the same display size."""
        overlay = self.canvas
        if overlay.shape[:2] != image.shape[:2]:
            overlay = cv2.resize(
                overlay,
                (image.shape[1], image.shape[0]),
                interpolation=cv2.INTER_NEAREST,
            )
        alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
        blended = image[:, :, :3].astype(np.float32) * (1.0 - alpha)
        blended += overlay[:, :, :3].astype(np.float32) * alpha
        return blended.astype(np.uint8)


class OverlayRenderer:
    """Draw display-space detections as labelled boxes on a surface."""

    line_width = 2
    label_offset = 25
    label_height = 20
    label_padding = 10
    text_inset_x = 5
    text_inset_y = 10
    text_color = "white"

    def __init__(self, surface: DrawingSurface, num_colors: int) -> None:
        self.surface = surface
        self.num_colors = max(1, num_colors)

    @property
    def display_size(self) -> tuple[int, int]:
        return self.surface.width, self.surface.height

    def resize(self, width: int, height: int) -> None:
        self.surface.resize(width, height)

    def clear(self) -> None:
        self.surface.clear()

    def render(self, detections: Sequence[Detection]) -> None:
        """Replace the previous overlay with ``detections``."""
        surface = self.surface
        surface.clear()

        for det in detections:
            color = color_for_class(det.class_id, self.num_colors)
            box = det.box
            surface.stroke_rect(
                box.x, box.y, box.width, box.height, color, self.line_width
            )

            label = f"{det.class_name} {det.confidence * 100:.1f}%"
            text_width = surface.measure_text(label)
            surface.fill_rect(
                box.x,
                box.y - self.label_offset,
                text_width + self.label_padding,
                self.label_height,
                color,
            )
            surface.fill_text(
                label,
                box.x + self.text_inset_x,
                box.y - self.text_inset_y,
                self.text_color,
            )
