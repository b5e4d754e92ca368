"""Class-name table and deterministic class colors."""

from __future__ import annotations

import colorsys
import re
from functools import lru_cache

from yolo_overlay.pipeline.types import DEFAULT_CLASS_NAMES


CLASS_NAMES: tuple[str, ...] = DEFAULT_CLASS_NAMES

GOLDEN_ANGLE_DEG = 137.50776
SATURATION_PERCENT = 70
LIGHTNESS_PERCENT = 50

_HSL_PATTERN = re.compile(
    r"hsl\(\s*([-\d.]+)\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)"
)


@lru_cache(maxsize=16)
def generate_colors(num_colors: int) -> tuple[str, ...]:
    """Return ``num_colors`` CSS hsl() strings spaced by the golden angle."""
    colors = []
    for i in range(num_colors):
        hue = round((i * GOLDEN_ANGLE_DEG) % 360, 3)
        colors.append(f"hsl({hue:g}, {SATURATION_PERCENT}%, {LIGHTNESS_PERCENT}%)")
    return tuple(colors)


def color_for_class(class_id: int, num_colors: int) -> str:
    """Pick the color for ``class_id`` from a table of ``num_colors`` entries."""
    colors = generate_colors(max(1, num_colors))
    return colors[class_id % len(colors)]


def class_name_for(class_id: int, class_names: tuple[str, ...] = CLASS_NAMES) -> str:
    if 0 <= class_id < len(class_names):
        return class_names[class_id]
    return f"Class {class_id}"


@lru_cache(maxsize=64)
def hsl_to_bgr(color: str) -> tuple[int, int, int]:
    """Convert an ``hsl(H, S%, L%)`` string into an OpenCV BGR tuple."""
    match = _HSL_PATTERN.fullmatch(color.strip())
    if match is None:
        message = f"Unsupported color string: {color!r}"
        raise ValueError(message)
    hue, sat, light = (float(part) for part in match.groups())
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, light / 100.0, sat / 100.0)
    return round(b * 255), round(g * 255), round(r * 255)
