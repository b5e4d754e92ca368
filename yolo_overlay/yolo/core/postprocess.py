"""Decoding of raw YOLO detection outputs into structured detections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from loguru import logger

from yolo_overlay.pipeline.errors import MalformedOutput
from yolo_overlay.pipeline.types import Box, Detection, ModelConfig
from yolo_overlay.yolo.core.constants import class_name_for


if TYPE_CHECKING:
    from collections.abc import Sequence


def infer_output_layout(
    output_shape: Sequence[object] | None,
) -> tuple[int, int] | None:
    """Return ``(num_classes, num_candidates)`` for a ``[1, 4+C, N]`` shape."""
    if not output_shape or len(output_shape) != 3:
        return None
    _, channels, candidates = output_shape
    if not (isinstance(channels, int) and isinstance(candidates, int)):
        return None
    if channels <= 4:
        return None
    return channels - 4, candidates


def _box_iou(a: Box, b: Box) -> float:
    inter_w = min(a.x + a.width, b.x + b.width) - max(a.x, b.x)
    inter_h = min(a.y + a.height, b.y + b.height) - max(a.y, b.y)
    if inter_w <= 0 or inter_h <= 0:
        return 0.0
    inter = inter_w * inter_h
    union = a.width * a.height + b.width * b.height - inter
    return inter / max(union, 1e-6)


def decode_output(
    raw: object,
    config: ModelConfig,
    *,
    debug_boxes: bool = False,
) -> list[Detection]:
    """Decode a flat ``[1, 4+C, N]`` output into detections in input space.

    For candidate ``i`` the box parameters live at ``i``, ``i+N``, ``i+2N``,
    ``i+3N`` and class score ``j`` at ``i+(4+j)*N``. A candidate is kept when
    its best class score is strictly above ``config.conf_threshold``; ties
    between class scores resolve to the lowest class index. Results keep
    ascending candidate order and overlapping boxes are not merged.

    Raises:
        MalformedOutput: if the output length differs from ``(4+C)*N``.
    """
    data = np.asarray(raw, dtype=np.float32).reshape(-1)
    expected = config.output_length
    if data.size != expected:
        raise MalformedOutput(expected, int(data.size))

    num_candidates = config.num_candidates
    grid = data.reshape(4 + config.num_classes, num_candidates)

    scores = grid[4:]
    class_ids = np.argmax(scores, axis=0)
    max_scores = scores[class_ids, np.arange(num_candidates)]
    keep = np.flatnonzero(max_scores > config.conf_threshold)

    cx, cy, w, h = grid[:4, keep].astype(np.float64)
    x1 = cx - w / 2
    y1 = cy - h / 2

    if debug_boxes and keep.size:
        logger.debug(
            "Decoded boxes (first 3): {}",
            np.stack([x1, y1, w, h], axis=1)[:3].round(2).tolist(),
        )

    detections: list[Detection] = []
    for n, idx in enumerate(keep):
        class_id = int(class_ids[idx])
        detections.append(
            Detection(
                box=Box(float(x1[n]), float(y1[n]), float(w[n]), float(h[n])),
                class_id=class_id,
                confidence=float(max_scores[idx]),
                class_name=class_name_for(class_id, config.class_names),
            )
        )
    return detections


def non_max_suppression(
    detections: Sequence[Detection],
    iou_threshold: float,
) -> list[Detection]:
    """Greedy per-class suppression of overlapping detections.

    Detections are visited by descending confidence; a detection is dropped
    when it overlaps an already kept detection of the same class with IoU
    at or above ``iou_threshold``. Survivors keep their input order.
    """
    if not detections:
        return []

    order = sorted(
        range(len(detections)),
        key=lambda i: detections[i].confidence,
        reverse=True,
    )
    kept: list[int] = []
    for i in order:
        candidate = detections[i]
        if any(
            detections[k].class_id == candidate.class_id
            and _box_iou(detections[k].box, candidate.box) >= iou_threshold
            for k in kept
        ):
            continue
        kept.append(i)
    return [detections[i] for i in sorted(kept)]


def postprocess(
    raw: object,
    config: ModelConfig,
    *,
    debug_output: bool = False,
    debug_boxes: bool = False,
) -> list[Detection]:
    """Decode a model output and apply suppression if it is configured."""
    if debug_output:
        logger.info("Model output shape: {}", np.asarray(raw).shape)

    detections = decode_output(raw, config, debug_boxes=debug_boxes)
    if config.nms_iou_threshold is not None:
        detections = non_max_suppression(detections, config.nms_iou_threshold)
    return detections
