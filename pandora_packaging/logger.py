"""Loguru sinks for one release-tool invocation."""

from __future__ import annotations

import pathlib
import sys
from typing import Any

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> {message}"
KEPT_RUN_LOGS = 10


def setup_logging(
    *,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_directory: str = "logs",
    log_filename: str = "pandora_release_{time:YYYYMMDD_HHmmss}.log",
) -> pathlib.Path:
    """Send console output to stdout and a JSON record of this run to its own file.

    Each invocation gets a fresh file under ``log_directory``; only the most
    recent ``KEPT_RUN_LOGS`` run logs are retained. Returns the log directory.
    """

    logger.remove()

    log_path = pathlib.Path(log_directory).expanduser().resolve()
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(sys.stdout, level=console_level.upper(), format=CONSOLE_FORMAT, colorize=True)
    logger.add(
        log_path / log_filename,
        level=file_level.upper(),
        backtrace=False,
        diagnose=False,
        retention=KEPT_RUN_LOGS,
        serialize=True,
    )

    logger.bind(console_level=console_level, file_level=file_level, log_directory=str(log_path)).debug(
        "Logging configured"
    )
    return log_path


def log_stage_event(event: str, **metadata: Any) -> None:
    """Emit a structured log entry for a pipeline stage transition.

    ``metadata`` typically carries ``stage``, ``state``, ``platform``,
    ``version`` or ``returncode``.
    """

    logger.bind(event=event, **metadata).info("stage_event")


__all__ = ["setup_logging", "log_stage_event"]
