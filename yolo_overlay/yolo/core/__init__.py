"""Core YOLO utilities (constants, preprocess, postprocess, mapping)."""

from __future__ import annotations

from yolo_overlay.yolo.core.constants import (
    CLASS_NAMES,
    class_name_for,
    color_for_class,
    generate_colors,
    hsl_to_bgr,
)
from yolo_overlay.yolo.core.mapping import scale_box, scale_detections
from yolo_overlay.yolo.core.postprocess import (
    decode_output,
    infer_output_layout,
    non_max_suppression,
    postprocess,
)
from yolo_overlay.yolo.core.preprocess import infer_input_size, preprocess


__all__ = [
    "CLASS_NAMES",
    "class_name_for",
    "color_for_class",
    "decode_output",
    "generate_colors",
    "hsl_to_bgr",
    "infer_input_size",
    "infer_output_layout",
    "non_max_suppression",
    "postprocess",
    "preprocess",
    "scale_box",
    "scale_detections",
]
