"""Pinned-compiler gate for the LaunchWrapper build."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .commands import CommandRunner
from .stages import FailureKind, StageResult


def parse_compiler_version(output: str) -> Optional[str]:
    """Extract ``1.8.0_392`` from ``javac 1.8.0_392`` style output.

    JVM banners such as ``Picked up _JAVA_OPTIONS`` may precede the version
    line, so every line is inspected.
    """

    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "javac":
            return parts[1]
    return None


def major_minor(version: str) -> str:
    return ".".join(version.split(".")[:2])


class ToolchainVersionGate:
    """Refuse to continue unless the active javac is exactly the pinned major.minor."""

    def __init__(self, runner: CommandRunner, required: str = "1.8", compiler: str = "javac") -> None:
        self.runner = runner
        self.required = required
        self.compiler = compiler

    def actual_version(self) -> Optional[str]:
        completed = self.runner.run([self.compiler, "-version"], capture_output=True)
        if completed.returncode != 0:
            return None
        # Java 8 reports on stderr, later releases on stdout.
        return parse_compiler_version("\n".join(filter(None, [completed.stderr, completed.stdout])))

    def check(self) -> StageResult:
        actual = self.actual_version()
        if actual is None or major_minor(actual) != self.required:
            detail = f"Must use {self.compiler} {self.required}, got {actual or 'unknown'}"
            logger.error(detail)
            return StageResult.failed("toolchain", detail, kind=FailureKind.TOOLCHAIN_MISMATCH)
        logger.info("Using {} {}", self.compiler, actual)
        return StageResult.ok("toolchain", f"{self.compiler} {actual} matches {self.required}")


__all__ = ["ToolchainVersionGate", "major_minor", "parse_compiler_version"]
