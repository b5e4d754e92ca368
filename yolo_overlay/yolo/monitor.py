"""Main entry point for the live detection overlay."""

from __future__ import annotations

import asyncio
import platform
from dataclasses import dataclass
from typing import TYPE_CHECKING

import cv2
import numpy as np
import onnxruntime as ort
from loguru import logger

from yolo_overlay.pipeline.capture import CameraCapture
from yolo_overlay.pipeline.errors import (
    CaptureAcquisitionFailure,
    ModelLoadFailure,
)
from yolo_overlay.pipeline.logging import (
    attach_log_buffer,
    configure_logging,
    create_log_buffer,
)
from yolo_overlay.pipeline.types import DetectorState, SessionPhase
from yolo_overlay.yolo.cli import build_camera_config, build_model_config, parse_args
from yolo_overlay.yolo.controller import LoopController
from yolo_overlay.yolo.core.postprocess import infer_output_layout
from yolo_overlay.yolo.core.preprocess import infer_input_size
from yolo_overlay.yolo.inference import OnnxInferenceBackend, default_providers
from yolo_overlay.yolo.ui.draw import OpenCVSurface, OverlayRenderer


if TYPE_CHECKING:
    import argparse
    from collections import deque

    from yolo_overlay.pipeline.types import Detection, Frame, ModelConfig


WINDOW_TITLE = "YOLO Detection Overlay"


class OverlayWindow:
    """OpenCV window showing each frame with the overlay and a status line."""

    def __init__(
        self,
        surface: OpenCVSurface,
        state: DetectorState,
        log_buffer: deque[str],
        title: str = WINDOW_TITLE,
    ) -> None:
        self.surface = surface
        self.state = state
        self.log_buffer = log_buffer
        self.title = title
        self.quit_requested = False

    def _draw_status(self, image: np.ndarray, detection_count: int) -> None:
        status = f"FPS: {self.state.fps} | Detections: {detection_count}"
        cv2.putText(
            image,
            status,
            (10, 25),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (0, 255, 255),
            2,
        )
        if self.log_buffer:
            cv2.putText(
                image,
                self.log_buffer[-1][:90],
                (10, image.shape[0] - 10),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.4,
                (200, 200, 200),
                1,
                cv2.LINE_AA,
            )

    def show(self, frame: Frame, detections: list[Detection]) -> None:
        """Composite the overlay onto ``frame`` and present it."""
        image = frame.pixels
        if frame.pixels.ndim == 3 and frame.pixels.shape[2] == 4:
            image = frame.pixels[:, :, :3]
        if frame.pixel_format.rgb_indices == (0, 1, 2):
            image = image[:, :, ::-1]
        composed = self.surface.composite(np.ascontiguousarray(image))
        self._draw_status(composed, len(detections))
        cv2.imshow(self.title, composed)
        if cv2.waitKey(1) & 0xFF == ord("q"):
            logger.info("Quit requested by user")
            self.quit_requested = True

    def close(self) -> None:
        cv2.destroyAllWindows()


@dataclass
class OverlayContext:
    """Objects making up one detection session."""

    args: argparse.Namespace
    config: ModelConfig
    state: DetectorState
    backend: OnnxInferenceBackend
    camera: CameraCapture
    surface: OpenCVSurface
    controller: LoopController
    window: OverlayWindow | None


def _check_model_layout(backend: OnnxInferenceBackend, config: ModelConfig) -> None:
    input_size = infer_input_size(backend.input_shape, default=config.input_size)
    if input_size != config.input_size:
        logger.warning(
            "Model input side is {} but configured input size is {}",
            input_size,
            config.input_size,
        )

    layout = infer_output_layout(backend.output_shape)
    if layout is None:
        logger.debug("Model output shape {} is dynamic", backend.output_shape)
        return
    num_classes, num_candidates = layout
    if (num_classes, num_candidates) != (config.num_classes, config.num_candidates):
        logger.warning(
            "Model reports {} classes x {} candidates, configured {} x {}; "
            "frames will be dropped as malformed",
            num_classes,
            num_candidates,
            config.num_classes,
            config.num_candidates,
        )


def _build_context(args: argparse.Namespace, log_buffer: deque[str]) -> OverlayContext:
    logger.info("=" * 60)
    logger.info("YOLO Object Detection Overlay")
    logger.info("=" * 60)
    logger.info("Platform: {} {}", platform.system(), platform.release())
    logger.info("Python: {}", platform.python_version())
    logger.info("OpenCV: {}", cv2.__version__)
    logger.info("ONNX Runtime: {}", ort.__version__)

    config = build_model_config(args)
    camera_config = build_camera_config(args)
    logger.info(
        "Model constants: S={} N={} C={} threshold={}",
        config.input_size,
        config.num_candidates,
        config.num_classes,
        config.conf_threshold,
    )

    state = DetectorState()
    backend = OnnxInferenceBackend(
        args.model,
        input_name=config.input_name,
        output_name=config.output_name,
        providers=default_providers(args.gpu),
        load_timeout=args.load_timeout,
    )
    camera = CameraCapture(camera_config)
    surface = OpenCVSurface(camera_config.width, camera_config.height)
    renderer = OverlayRenderer(surface, num_colors=len(config.class_names))

    window = None
    if not args.no_display:
        window = OverlayWindow(surface, state, log_buffer)

    controller = LoopController(
        state,
        config,
        backend,
        camera,
        renderer,
        refresh_hz=args.refresh_hz,
        on_cycle=window.show if window is not None else None,
        debug_boxes=args.debug_boxes,
    )

    return OverlayContext(
        args=args,
        config=config,
        state=state,
        backend=backend,
        camera=camera,
        surface=surface,
        controller=controller,
        window=window,
    )


async def _watch_quit(ctx: OverlayContext) -> None:
    while ctx.state.running:
        if ctx.window is not None and ctx.window.quit_requested:
            ctx.controller.stop()
            break
        await asyncio.sleep(0.05)


async def _run_session(ctx: OverlayContext) -> int:
    try:
        await ctx.controller.load_model()
    except ModelLoadFailure as exc:
        logger.error("Detection disabled: {}", exc)
        return 1

    _check_model_layout(ctx.backend, ctx.config)
    if ctx.args.debug_output:
        logger.info("Model output shape: {}", ctx.backend.output_shape)

    try:
        await ctx.controller.start()
    except CaptureAcquisitionFailure as exc:
        logger.error("{}", exc)
        return 1

    camera_info = ctx.camera.get_info()
    logger.info("Active backend: {}", camera_info["backend"])
    logger.info("Display: {}x{}", ctx.surface.width, ctx.surface.height)
    logger.info("-" * 60)
    logger.info("Starting detection loop. Press 'q' to quit.")
    logger.info("-" * 60)

    try:
        await asyncio.gather(_watch_quit(ctx), ctx.controller.wait_stopped())
    finally:
        if ctx.state.phase is SessionPhase.DETECTING:
            ctx.controller.stop()
        _log_summary(ctx)

    return 0


def _log_summary(ctx: OverlayContext) -> None:
    metrics = ctx.controller.perf_tracker.get_metrics()
    logger.info("=" * 60)
    logger.info("Session Summary")
    logger.info("Total cycles: {}", metrics.total_cycles)
    logger.info("Last throughput: {:.0f} FPS", metrics.fps)
    logger.info("Avg inference: {:.1f}ms", metrics.inference_ms)
    logger.info("Avg budget used: {:.1f}%", metrics.frame_budget_percent)


def run_overlay(argv: list[str] | None = None) -> int:
    """Entry point for the detection overlay."""
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_dir, json_logs=args.json_logs)
    log_buffer = create_log_buffer(max_lines=200)
    attach_log_buffer(log_buffer, level="INFO")

    try:
        ctx = _build_context(args, log_buffer)
    except ValueError as exc:
        logger.error("Invalid configuration: {}", exc)
        return 2

    try:
        exit_code = asyncio.run(_run_session(ctx))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 0
    finally:
        ctx.camera.release()
        if ctx.window is not None:
            ctx.window.close()

    logger.success("Cleanup complete. Goodbye!")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(run_overlay())
