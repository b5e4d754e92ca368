"""Overlay drawing surfaces and renderer."""

from __future__ import annotations

from yolo_overlay.yolo.ui.draw import DrawingSurface, OpenCVSurface, OverlayRenderer


__all__ = [
    "DrawingSurface",
    "OpenCVSurface",
    "OverlayRenderer",
]
