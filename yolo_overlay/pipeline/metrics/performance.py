"""Throughput and latency tracking for the detection loop."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from yolo_overlay.pipeline.types import PerformanceMetrics


if TYPE_CHECKING:
    from collections.abc import Callable


class ThroughputMeter:
    """Convert completed-cycle counts into a rate once per reporting window.

    This is a reporting window rather than an instantaneous rate: cycles are
    counted until at least ``window_ms`` has elapsed since the last reset,
    then ``round(count * 1000 / elapsed_ms)`` is published and the window
    restarts.
    """

    def __init__(
        self,
        window_ms: float = 1000.0,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the meter; ``clock`` returns seconds."""
        self.window_ms = window_ms
        self._clock = clock
        self.count = 0
        self.window_start = clock()
        self.fps: int | None = None

    def reset(self) -> None:
        """Restart the measurement window without publishing."""
        self.count = 0
        self.window_start = self._clock()

    def tick(self) -> int | None:
        """Record one completed cycle; return the new rate if one was published."""
        self.count += 1
        now = self._clock()
        elapsed_ms = (now - self.window_start) * 1000.0
        if elapsed_ms < self.window_ms:
            return None
        self.fps = round(self.count * 1000.0 / elapsed_ms)
        self.count = 0
        self.window_start = now
        return self.fps


class PerformanceTracker:
    """Track inference latency with a moving average."""

    def __init__(self, avg_frames: int = 30) -> None:
        """Initialize the tracker with a rolling window size."""
        self.avg_frames = avg_frames
        self.inference_times: list[float] = []
        self.total_cycles = 0
        self.last_fps = 0.0

    def add_inference_time(self, elapsed_ms: float) -> None:
        """Record a single inference duration in milliseconds."""
        self.inference_times.append(elapsed_ms)
        if len(self.inference_times) > self.avg_frames:
            self.inference_times.pop(0)

    def add_cycle(self) -> None:
        """Count one completed detection cycle."""
        self.total_cycles += 1

    def set_fps(self, fps: float) -> None:
        """Store the most recently published throughput."""
        self.last_fps = fps

    def get_metrics(self) -> PerformanceMetrics:
        """Compute aggregated performance metrics."""
        metrics = PerformanceMetrics(fps=self.last_fps, total_cycles=self.total_cycles)

        if self.inference_times:
            metrics.inference_ms = sum(self.inference_times) / len(self.inference_times)
            if metrics.fps > 0:
                frame_budget_ms = 1000.0 / metrics.fps
                metrics.frame_budget_percent = (
                    metrics.inference_ms / frame_budget_ms
                ) * 100

        return metrics
