"""Inference backends feeding tensors to the detection model."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

import numpy as np
import onnxruntime as ort
from loguru import logger

from yolo_overlay.pipeline.errors import ModelLoadFailure


if TYPE_CHECKING:
    from collections.abc import Sequence


class InferenceBackend(Protocol):
    """Asynchronous model runner used by the loop controller."""

    async def load(self) -> None:
        """Initialize the model; called exactly once before any run."""
        ...

    async def run(self, tensor: np.ndarray) -> np.ndarray:
        """Run the model on ``tensor`` and return its raw output."""
        ...


def default_providers(gpu: int = 0) -> list[object]:
    """Prefer CUDA when available, always keeping the CPU provider."""
    available = set(ort.get_available_providers())
    providers: list[object] = []
    if "CUDAExecutionProvider" in available:
        providers.append(
            (
                "CUDAExecutionProvider",
                {"device_id": gpu, "arena_extend_strategy": "kNextPowerOfTwo"},
            )
        )
    providers.append("CPUExecutionProvider")
    return providers


class OnnxInferenceBackend:
    """ONNX Runtime session driven from worker threads."""

    def __init__(
        self,
        model_path: str,
        *,
        input_name: str = "images",
        output_name: str = "output0",
        providers: Sequence[object] | None = None,
        load_timeout: float = 60.0,
    ) -> None:
        self.model_path = model_path
        self.input_name = input_name
        self.output_name = output_name
        self.providers = list(providers) if providers is not None else None
        self.load_timeout = load_timeout
        self._session: ort.InferenceSession | None = None
        self.input_shape: list[object] | None = None
        self.output_shape: list[object] | None = None
        self.active_provider = ""

    @property
    def is_loaded(self) -> bool:
        return self._session is not None

    def _create_session(self) -> ort.InferenceSession:
        options = ort.SessionOptions()
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        providers = self.providers
        if providers is None:
            providers = default_providers()
        return ort.InferenceSession(
            self.model_path,
            sess_options=options,
            providers=providers,
        )

    async def load(self) -> None:
        """Create the session off the event loop, bounded by ``load_timeout``."""
        if self._session is not None:
            message = "Model is already loaded"
            raise RuntimeError(message)

        logger.info("Loading model: {}", self.model_path)
        try:
            session = await asyncio.wait_for(
                asyncio.to_thread(self._create_session),
                timeout=self.load_timeout,
            )
        except asyncio.TimeoutError as exc:
            message = (
                f"Timed out after {self.load_timeout:.0f}s loading {self.model_path}"
            )
            raise ModelLoadFailure(message) from exc
        except Exception as exc:
            message = f"Failed to load model {self.model_path}: {exc}"
            raise ModelLoadFailure(message) from exc

        inputs = {node.name: node for node in session.get_inputs()}
        outputs = {node.name: node for node in session.get_outputs()}
        if self.input_name not in inputs:
            fallback = session.get_inputs()[0].name
            logger.warning(
                "Model has no input named '{}', using '{}'", self.input_name, fallback
            )
            self.input_name = fallback
        if self.output_name not in outputs:
            fallback = session.get_outputs()[0].name
            logger.warning(
                "Model has no output named '{}', using '{}'",
                self.output_name,
                fallback,
            )
            self.output_name = fallback

        self.input_shape = list(inputs[self.input_name].shape)
        self.output_shape = list(outputs[self.output_name].shape)
        self.active_provider = session.get_providers()[0]
        self._session = session

        logger.success("Model loaded using: {}", self.active_provider)
        logger.debug(
            "Model input: {} {}, output: {} {}",
            self.input_name,
            self.input_shape,
            self.output_name,
            self.output_shape,
        )

    async def run(self, tensor: np.ndarray) -> np.ndarray:
        """Run one inference call in a worker thread."""
        if self._session is None:
            message = "Model is not loaded"
            raise RuntimeError(message)

        session = self._session
        outputs = await asyncio.to_thread(
            session.run,
            [self.output_name],
            {self.input_name: tensor},
        )
        return np.asarray(outputs[0], dtype=np.float32)
