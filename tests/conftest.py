"""Shared fakes for the overlay tests."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import numpy as np
import pytest
from loguru import logger

from yolo_overlay.pipeline.types import Frame, PixelFormat


if TYPE_CHECKING:
    from collections.abc import Callable


def build_raw_output(
    num_candidates: int,
    num_classes: int,
    candidates: dict[int, tuple[tuple[float, float, float, float], tuple[float, ...]]],
) -> np.ndarray:
    """Build a flat ``[1, 4+C, N]`` output with the given candidate rows set."""
    grid = np.zeros((4 + num_classes, num_candidates), dtype=np.float32)
    for index, (box, scores) in candidates.items():
        grid[:4, index] = box
        grid[4:, index] = scores
    return grid.reshape(1, 4 + num_classes, num_candidates)


class RecordingSurface:
    """Drawing surface that records every primitive call."""

    def __init__(self, width: int = 640, height: int = 640) -> None:
        self.width = width
        self.height = height
        self.calls: list[tuple] = []

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.calls.append(("resize", width, height))

    def clear(self) -> None:
        self.calls.append(("clear",))

    def stroke_rect(self, x, y, w, h, color, line_width) -> None:
        self.calls.append(("stroke_rect", x, y, w, h, color, line_width))

    def fill_rect(self, x, y, w, h, color) -> None:
        self.calls.append(("fill_rect", x, y, w, h, color))

    def fill_text(self, text, x, y, color) -> None:
        self.calls.append(("fill_text", text, x, y, color))

    def measure_text(self, text: str) -> float:
        return 7.0 * len(text)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeSource:
    """Frame source returning the same synthetic frame on every read."""

    def __init__(
        self,
        width: int = 64,
        height: int = 48,
        *,
        can_open: bool = True,
        open_error: Exception | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.can_open = can_open
        self.open_error = open_error
        self.opened = False
        self.open_calls = 0
        self.release_calls = 0
        self.reads = 0
        self.fail_reads = 0

    def open(self) -> bool:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        self.opened = self.can_open
        return self.can_open

    def read(self) -> tuple[bool, Frame | None]:
        if not self.opened:
            return False, None
        if self.fail_reads > 0:
            self.fail_reads -= 1
            return False, None
        self.reads += 1
        pixels = np.full((self.height, self.width, 3), 128, dtype=np.uint8)
        return True, Frame(pixels=pixels, pixel_format=PixelFormat.BGR)

    def release(self) -> None:
        self.release_calls += 1
        self.opened = False

    def is_opened(self) -> bool:
        return self.opened

    def get_info(self) -> dict:
        return {
            "backend": "fake",
            "source": "fake",
            "width": self.width,
            "height": self.height,
            "fps": 30.0,
        }


class FakeBackend:
    """Inference backend returning scripted outputs.

    ``outputs`` is consumed one entry per call; the last entry repeats. An
    entry that is an exception instance is raised instead of returned. When
    ``gate`` is set, each run waits for it before returning.
    """

    def __init__(
        self,
        outputs: list[object],
        *,
        load_error: Exception | None = None,
    ) -> None:
        self.outputs = list(outputs)
        self.load_error = load_error
        self.load_calls = 0
        self.run_calls = 0
        self.gate: asyncio.Event | None = None
        self.started: asyncio.Event | None = None

    async def load(self) -> None:
        self.load_calls += 1
        if self.load_error is not None:
            raise self.load_error

    async def run(self, tensor: np.ndarray) -> np.ndarray:
        self.run_calls += 1
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        index = min(self.run_calls - 1, len(self.outputs) - 1)
        result = self.outputs[index]
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def raw_output() -> Callable[..., np.ndarray]:
    return build_raw_output


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_backend() -> Callable[..., FakeBackend]:
    return FakeBackend


@pytest.fixture
def make_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture(autouse=True)
def _reset_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
