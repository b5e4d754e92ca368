"""Detection loop state machine driving capture, inference and rendering."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from loguru import logger

from yolo_overlay.pipeline.errors import (
    CaptureAcquisitionFailure,
    InvalidTransition,
    MalformedOutput,
    ModelLoadFailure,
)
from yolo_overlay.pipeline.metrics.performance import (
    PerformanceTracker,
    ThroughputMeter,
)
from yolo_overlay.pipeline.types import SessionPhase
from yolo_overlay.yolo.core.mapping import scale_detections
from yolo_overlay.yolo.core.postprocess import postprocess
from yolo_overlay.yolo.core.preprocess import preprocess


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from yolo_overlay.pipeline.capture.core import CaptureProtocol
    from yolo_overlay.pipeline.types import (
        Detection,
        DetectorState,
        Frame,
        ModelConfig,
    )
    from yolo_overlay.yolo.inference import InferenceBackend
    from yolo_overlay.yolo.ui.draw import OverlayRenderer


class LoopController:
    """Run preprocess, inference, decode, mapping and rendering once per refresh.

    Phases move ``IDLE -> MODEL_LOADING -> READY -> DETECTING -> READY``. A
    failed model load returns the session to ``IDLE`` for good. At most one
    cycle is in flight: the loop awaits each cycle, then yields to
    ``scheduler`` before checking the running flag again. ``stop()`` only
    clears that flag, so a cycle suspended at the inference call still
    renders once before the loop exits.
    """

    def __init__(
        self,
        state: DetectorState,
        config: ModelConfig,
        backend: InferenceBackend,
        source: CaptureProtocol,
        renderer: OverlayRenderer,
        *,
        refresh_hz: float = 60.0,
        scheduler: Callable[[], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.perf_counter,
        on_fps: Callable[[int], None] | None = None,
        on_cycle: Callable[[Frame, list[Detection]], None] | None = None,
        debug_boxes: bool = False,
    ) -> None:
        self.state = state
        self.config = config
        self.backend = backend
        self.source = source
        self.renderer = renderer
        self.refresh_hz = refresh_hz
        self._scheduler = scheduler or self._wait_for_refresh
        self._clock = clock
        self.on_fps = on_fps
        self.on_cycle = on_cycle
        self.debug_boxes = debug_boxes
        self.throughput = ThroughputMeter(clock=clock)
        self.perf_tracker = PerformanceTracker()
        self._task: asyncio.Task[None] | None = None
        self._starting = False

    async def _wait_for_refresh(self) -> None:
        delay = 1.0 / self.refresh_hz if self.refresh_hz > 0 else 0.0
        await asyncio.sleep(delay)

    def _require(self, phase: SessionPhase, command: str) -> None:
        if self.state.phase is not phase:
            message = (
                f"{command}() requires phase {phase.value}, "
                f"session is {self.state.phase.value}"
            )
            raise InvalidTransition(message)

    async def load_model(self) -> None:
        """Initialize the inference backend.

        Raises:
            ModelLoadFailure: the backend rejected initialization; detection
                stays disabled for this session.
        """
        self._require(SessionPhase.IDLE, "load_model")
        if self.state.model_failed:
            message = "Model load already failed for this session"
            raise InvalidTransition(message)

        self.state.phase = SessionPhase.MODEL_LOADING
        try:
            await self.backend.load()
        except Exception as exc:
            self.state.phase = SessionPhase.IDLE
            self.state.model_failed = True
            logger.error("Error loading model: {}", exc)
            if isinstance(exc, ModelLoadFailure):
                raise
            message = f"Model initialization failed: {exc}"
            raise ModelLoadFailure(message) from exc

        self.state.model_ready = True
        self.state.phase = SessionPhase.READY
        logger.success("Model loaded, ready to start detection")

    async def start(self) -> None:
        """Acquire the frame source and begin the detection loop.

        If the previous loop is still finishing its last cycle, that loop is
        awaited first; a second ``start()`` issued meanwhile is rejected.

        Raises:
            InvalidTransition: the session is not ``READY`` or another start
                is already waiting.
            CaptureAcquisitionFailure: the source could not be opened; the
                session stays ``READY`` so the operator may retry.
        """
        self._require(SessionPhase.READY, "start")
        if self._starting:
            message = "start() is already in progress"
            raise InvalidTransition(message)

        if self._task is not None and not self._task.done():
            self._starting = True
            try:
                await self._task
            finally:
                self._starting = False
            self._require(SessionPhase.READY, "start")

        try:
            opened = self.source.open()
        except Exception as exc:
            logger.error("Error accessing capture source: {}", exc)
            message = f"Capture source unavailable: {exc}"
            raise CaptureAcquisitionFailure(message) from exc
        if not opened:
            logger.error("Error accessing capture source")
            message = "Capture source could not be opened"
            raise CaptureAcquisitionFailure(message)

        info = self.source.get_info()
        width, height = int(info.get("width", 0)), int(info.get("height", 0))
        if width > 0 and height > 0:
            self.renderer.resize(width, height)

        self.throughput.reset()
        self.state.frame_count = 0
        self.state.window_start = self.throughput.window_start
        self.state.running = True
        self.state.phase = SessionPhase.DETECTING
        logger.info("Capture started, detecting objects...")

        self._task = asyncio.create_task(self._run(), name="yolo-detection")

    def stop(self) -> None:
        """Release the source, clear the overlay and return to ``READY``."""
        self._require(SessionPhase.DETECTING, "stop")
        self.state.running = False
        self.source.release()
        self.renderer.clear()
        self.state.phase = SessionPhase.READY
        logger.info("Capture stopped")

    async def wait_stopped(self) -> None:
        """Wait until the loop task has exited."""
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        while self.state.running:
            await self.run_cycle()
            if not self.state.running:
                break
            await self._scheduler()
        logger.debug("Detection loop exited")

    async def run_cycle(self) -> list[Detection] | None:
        """Run one capture-to-render cycle.

        Returns the rendered display-space detections, or None when the frame
        could not be grabbed or the cycle failed.
        """
        try:
            ok, frame = self.source.read()
            if not ok or frame is None:
                logger.warning("Failed to grab frame")
                return None

            tensor = preprocess(frame, self.config.input_size)

            inference_start = time.perf_counter()
            raw = await self.backend.run(tensor)
            self.perf_tracker.add_inference_time(
                (time.perf_counter() - inference_start) * 1000
            )

            try:
                detections = postprocess(raw, self.config, debug_boxes=self.debug_boxes)
            except MalformedOutput as exc:
                logger.warning("Dropping detections for this frame: {}", exc)
                detections = []

            scaled = scale_detections(
                detections, self.renderer.display_size, self.config.input_size
            )
            self.renderer.render(scaled)
            if self.on_cycle is not None:
                self.on_cycle(frame, scaled)
        except Exception as exc:
            logger.exception("Detection error: {}", exc)
            return None

        self._complete_cycle(len(scaled))
        return scaled

    def _complete_cycle(self, detection_count: int) -> None:
        self.state.last_detection_count = detection_count
        self.perf_tracker.add_cycle()

        fps = self.throughput.tick()
        self.state.frame_count = self.throughput.count
        self.state.window_start = self.throughput.window_start
        if fps is None:
            return

        self.state.fps = fps
        self.perf_tracker.set_fps(fps)
        logger.info("FPS: {} | Detections: {}", fps, detection_count)
        if self.on_fps is not None:
            self.on_fps(fps)
