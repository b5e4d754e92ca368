"""timeit run for decoding a full-size YOLO output tensor."""

import timeit

import numpy as np
from loguru import logger

from yolo_overlay.pipeline.types import ModelConfig
from yolo_overlay.yolo.core.postprocess import decode_output


CONFIG = ModelConfig()
RAW = np.random.default_rng(0).random(CONFIG.output_length, dtype=np.float32)


def run() -> None:
    """Decode one 8400-candidate output."""
    decode_output(RAW, CONFIG)


if __name__ == "__main__":
    duration = timeit.timeit("run()", setup="from __main__ import run", number=50)
    avg = duration / 50
    logger.info("Average decode time over 50 runs: {:.4f} ms", avg * 1000)
