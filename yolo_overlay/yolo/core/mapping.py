"""Rescaling of detections from model-input space to display space."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from yolo_overlay.pipeline.types import Box


if TYPE_CHECKING:
    from collections.abc import Iterable

    from yolo_overlay.pipeline.types import Detection


def scale_box(box: Box, display_size: tuple[int, int], input_size: int) -> Box:
    """Stretch ``box`` from an S x S input onto a (width, height) display."""
    display_w, display_h = display_size
    scale_x = display_w / input_size
    scale_y = display_h / input_size
    return Box(
        x=box.x * scale_x,
        y=box.y * scale_y,
        width=box.width * scale_x,
        height=box.height * scale_y,
    )


def scale_detections(
    detections: Iterable[Detection],
    display_size: tuple[int, int],
    input_size: int,
) -> list[Detection]:
    return [
        replace(det, box=scale_box(det.box, display_size, input_size))
        for det in detections
    ]
