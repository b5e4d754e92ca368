from __future__ import annotations

import importlib

from yolo_overlay.yolo.cli import build_camera_config, build_model_config, parse_args
from yolo_overlay.yolo.controller import LoopController
from yolo_overlay.yolo.core.constants import CLASS_NAMES, generate_colors
from yolo_overlay.yolo.core.mapping import scale_detections
from yolo_overlay.yolo.core.postprocess import (
    decode_output,
    non_max_suppression,
    postprocess,
)
from yolo_overlay.yolo.core.preprocess import infer_input_size, preprocess
from yolo_overlay.yolo.inference import InferenceBackend, OnnxInferenceBackend
from yolo_overlay.yolo.ui.draw import DrawingSurface, OpenCVSurface, OverlayRenderer


def run_overlay(*args: object, **kwargs: object) -> int:
    """Run the overlay entry point via lazy import."""
    module = importlib.import_module("yolo_overlay.yolo.monitor")
    return module.run_overlay(*args, **kwargs)


__all__ = [
    "CLASS_NAMES",
    "DrawingSurface",
    "InferenceBackend",
    "LoopController",
    "OnnxInferenceBackend",
    "OpenCVSurface",
    "OverlayRenderer",
    "build_camera_config",
    "build_model_config",
    "decode_output",
    "generate_colors",
    "infer_input_size",
    "non_max_suppression",
    "parse_args",
    "postprocess",
    "preprocess",
    "run_overlay",
    "scale_detections",
]
