from __future__ import annotations

import argparse
import os

from yolo_overlay.pipeline.types import (
    DEFAULT_CLASS_NAMES,
    CameraConfig,
    ModelConfig,
)


def _parse_source(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def _parse_class_names(value: str) -> tuple[str, ...]:
    return tuple(name.strip() for name in value.split(",") if name.strip())


def parse_args(argv: list | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Real-time YOLO object detection overlay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  yolo-overlay --model best.onnx
  yolo-overlay --model best.onnx --camera 1 --conf 0.4
  yolo-overlay --model best.onnx --num-classes 80 --class-names person,bicycle,car
""",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=os.getenv("YOLO_OVERLAY_MODEL", "best.onnx"),
        help="Path to the ONNX detection model",
    )
    parser.add_argument(
        "--camera",
        type=_parse_source,
        default=0,
        help="Camera index, video file or stream URL",
    )
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--height", type=int, default=480)
    parser.add_argument("--fps", type=int, default=30)
    parser.add_argument(
        "--input-size",
        type=int,
        default=640,
        help="Square model input side length",
    )
    parser.add_argument(
        "--num-candidates",
        type=int,
        default=8400,
        help="Number of candidate boxes emitted per frame",
    )
    parser.add_argument("--num-classes", type=int, default=8)
    parser.add_argument("--conf", type=float, default=0.5)
    parser.add_argument(
        "--class-names",
        type=_parse_class_names,
        default=DEFAULT_CLASS_NAMES,
        help="Comma separated class names, in class-id order",
    )
    parser.add_argument("--input-name", type=str, default="images")
    parser.add_argument("--output-name", type=str, default="output0")
    parser.add_argument(
        "--nms-iou",
        type=float,
        default=None,
        help="Enable per-class non-maximum suppression at this IoU",
    )
    parser.add_argument("--refresh-hz", type=float, default=60.0)
    parser.add_argument("--gpu", type=int, default=0)
    parser.add_argument("--load-timeout", type=float, default=60.0)
    parser.add_argument("--no-display", action="store_true")
    parser.add_argument(
        "--debug-output",
        action="store_true",
        help="Log raw model output shape once at startup",
    )
    parser.add_argument(
        "--debug-boxes",
        action="store_true",
        help="Log decoded bbox coordinates for debugging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    parser.add_argument("--log-dir", type=str, default="logs")
    parser.add_argument("--json-logs", action="store_true")

    return parser.parse_args(argv)


def build_model_config(args: argparse.Namespace) -> ModelConfig:
    """Build the model configuration from parsed arguments."""
    return ModelConfig(
        input_size=args.input_size,
        num_candidates=args.num_candidates,
        num_classes=args.num_classes,
        conf_threshold=args.conf,
        class_names=tuple(args.class_names),
        input_name=args.input_name,
        output_name=args.output_name,
        nms_iou_threshold=args.nms_iou,
    )


def build_camera_config(args: argparse.Namespace) -> CameraConfig:
    """Build the capture configuration from parsed arguments."""
    return CameraConfig(
        source=args.camera,
        width=args.width,
        height=args.height,
        fps=args.fps,
    )
