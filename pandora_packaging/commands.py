"""Blocking invocation of external build tools."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Run one external tool to completion and hand back its result.

    Output is passed through to the terminal unless ``capture_output`` is set,
    so a failing tool's own diagnostics stay visible.
    """

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        args = [str(part) for part in cmd]
        logger.debug("Running: {}", " ".join(args))
        try:
            return subprocess.run(args, cwd=cwd, capture_output=capture_output, text=True, check=False)
        except FileNotFoundError as exc:
            logger.error("Executable not found: {}", args[0])
            return subprocess.CompletedProcess(args, COMMAND_NOT_FOUND, "", str(exc))


__all__ = ["CommandRunner", "COMMAND_NOT_FOUND"]
