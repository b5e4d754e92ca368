"""Performance metrics helpers for pipelines."""

from __future__ import annotations

from yolo_overlay.pipeline.metrics.performance import (
    PerformanceTracker,
    ThroughputMeter,
)


__all__ = [
    "PerformanceTracker",
    "ThroughputMeter",
]
