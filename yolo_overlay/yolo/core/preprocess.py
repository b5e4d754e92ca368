from __future__ import annotations

from typing import TYPE_CHECKING

import cv2
import numpy as np


if TYPE_CHECKING:
    from collections.abc import Sequence

    from yolo_overlay.pipeline.types import Frame


def infer_input_size(input_shape: Sequence[object] | None, default: int = 640) -> int:
    """Infer the square input side length from an ONNX input shape."""

    if not input_shape or len(input_shape) < 4:
        return default

    height = input_shape[-2]
    width = input_shape[-1]

    if isinstance(height, int) and isinstance(width, int) and height == width:
        return height

    return default


def preprocess(frame: Frame, input_size: int = 640) -> np.ndarray:
    """Resize a frame to ``input_size`` squared and build a (1, 3, S, S) tensor.

    The frame is stretched (no letterboxing), channels are reordered to RGB
    according to ``frame.pixel_format`` and intensities are mapped from
    [0, 255] to [0, 1]. Any fourth channel is ignored.
    """

    pixels = frame.pixels
    if pixels.shape[0] != input_size or pixels.shape[1] != input_size:
        pixels = cv2.resize(
            pixels, (input_size, input_size), interpolation=cv2.INTER_LINEAR
        )

    rgb = pixels[:, :, list(frame.pixel_format.rgb_indices)]
    blob = rgb.astype(np.float32) / 255.0
    blob = blob.transpose(2, 0, 1)[np.newaxis, ...]

    return np.ascontiguousarray(blob)
