"""Compile and bundle the LaunchWrapper supervisor archive."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .build_config import WrapperConfig
from .commands import CommandRunner
from .stages import StageResult
from .toolchain import ToolchainVersionGate


class WrapperBuildStep:
    """Gate on the pinned javac, then rebuild ``LaunchWrapper.jar`` from source.

    Nothing under the wrapper directory is touched unless the gate passes. A
    compiled class left over from an earlier build is deleted before
    recompiling so an output from another compiler can never be bundled.
    """

    def __init__(
        self,
        config: WrapperConfig,
        runner: CommandRunner,
        gate: Optional[ToolchainVersionGate] = None,
    ) -> None:
        self.config = config
        self.runner = runner
        self.gate = gate or ToolchainVersionGate(runner, config.required_version, config.compiler)

    def run(self) -> StageResult:
        gate_result = self.gate.check()
        if not gate_result.success:
            return gate_result

        source_dir = self.config.source_dir
        class_path = source_dir / self.config.class_file
        self._remove_stale_class()

        for required in (self.config.source_file, self.config.manifest_file):
            if not (source_dir / required).is_file():
                return StageResult.failed("wrapper", f"Missing wrapper input {source_dir / required}")

        compiled = StageResult.from_process(
            "javac",
            self.runner.run([self.config.compiler, self.config.source_file], cwd=source_dir),
            "LaunchWrapper compilation",
        )
        if not compiled.success:
            return compiled
        if not class_path.is_file():
            return StageResult.failed("javac", f"javac produced no {class_path}")

        bundle_cmd = [
            self.config.archiver,
            "cvfm",
            self.config.archive_name,
            self.config.manifest_file,
            self.config.class_file,
        ]
        bundled = StageResult.from_process(
            "jar",
            self.runner.run(bundle_cmd, cwd=source_dir),
            "LaunchWrapper bundling",
        )
        if not bundled.success:
            return bundled
        archive = self.config.archive_path
        if not archive.is_file():
            return StageResult.failed("jar", f"jar produced no {archive}")

        logger.success("Built {}", archive)
        return StageResult.ok("wrapper", f"Built {archive.name}", [archive])

    def _remove_stale_class(self) -> None:
        class_path = self.config.source_dir / self.config.class_file
        if class_path.exists():
            logger.debug("Removing stale {}", class_path)
        class_path.unlink(missing_ok=True)


__all__ = ["WrapperBuildStep"]
