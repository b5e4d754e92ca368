"""Loguru setup for the detection overlay."""

from __future__ import annotations

import os
import sys
from collections import deque
from pathlib import Path

from loguru import logger


LEVEL_ENV_VAR = "YOLO_OVERLAY_LOG_LEVEL"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {process}:{thread} | "
    "{name}:{function}:{line} | {message}"
)
STATUS_FORMAT = "{time:HH:mm:ss} | {level: <8} | {message}"


def _is_known_level(name: str) -> bool:
    try:
        logger.level(name)
    except ValueError:
        return False
    return True


def _add_file_sinks(log_dir: Path, level: str, *, json_logs: bool) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_dir / "overlay_{time:YYYY-MM-DD}.log"),
        rotation="10 MB",
        retention="7 days",
        level=level,
        format=FILE_FORMAT,
    )
    if json_logs:
        logger.add(
            str(log_dir / "overlay_{time:YYYY-MM-DD}.jsonl"),
            rotation="10 MB",
            retention="7 days",
            level=level,
            serialize=True,
        )


def configure_logging(
    log_level: str = "INFO",
    log_dir: str | None = "logs",
    *,
    json_logs: bool = False,
) -> None:
    """Replace all loguru sinks with the overlay's console and file sinks.

    A valid level in ``YOLO_OVERLAY_LOG_LEVEL`` wins over ``log_level``; an
    unknown one is reported and ignored. An empty or None ``log_dir`` keeps
    output on stdout only; otherwise a rotating text log (and, with
    ``json_logs``, a serialized JSON-lines log) is written there.
    """
    level = log_level.upper()
    override = os.getenv(LEVEL_ENV_VAR)
    rejected = None
    if override:
        if _is_known_level(override.upper()):
            level = override.upper()
        else:
            rejected = override

    logger.remove()
    logger.add(sink=sys.stdout, format=CONSOLE_FORMAT, level=level)
    if rejected is not None:
        logger.warning("Ignoring unknown {}={!r}", LEVEL_ENV_VAR, rejected)

    if log_dir:
        _add_file_sinks(Path(log_dir), level, json_logs=json_logs)


def create_log_buffer(max_lines: int = 200) -> deque[str]:
    return deque(maxlen=max_lines)


def attach_log_buffer(buffer: deque[str], level: str = "INFO") -> int:
    """Mirror log records into ``buffer`` for the on-screen status line."""

    def _sink(message: object) -> None:
        buffer.append(str(message).rstrip("\n"))

    return logger.add(_sink, level=level, format=STATUS_FORMAT)
