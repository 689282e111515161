"""Release compilation and binary post-processing."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Sequence

from loguru import logger

from .build_config import BuildConfig, PlatformConfig
from .commands import CommandRunner
from .stages import StageResult

# lipo names architectures differently from target triples
LIPO_ARCH_NAMES = {"aarch64": "arm64"}


def lipo_arch(triple: str) -> str:
    arch = triple.split("-", 1)[0]
    return LIPO_ARCH_NAMES.get(arch, arch)


class NativeBuilder:
    """Compile the launcher once per target triple, one after another."""

    def __init__(self, config: BuildConfig, runner: CommandRunner) -> None:
        self.config = config
        self.runner = runner

    def binary_path(self, platform: PlatformConfig, triple: str) -> Path:
        name = f"{self.config.binary_name}{platform.binary_suffix}"
        return self.config.base_dir / "target" / triple / "release" / name

    def build(self, platform: PlatformConfig) -> StageResult:
        binaries: list[Path] = []
        for triple in platform.target.triples:
            logger.info("Compiling {} release for {}", self.config.binary_name, triple)
            compiled = StageResult.from_process(
                "build",
                self.runner.run(["cargo", "build", "--release", "--target", triple], cwd=self.config.base_dir),
                f"cargo build for {triple}",
            )
            if not compiled.success:
                return compiled
            binary = self.binary_path(platform, triple)
            if not binary.is_file():
                return StageResult.failed("build", f"cargo build for {triple} produced no {binary}")
            binaries.append(binary)
        return StageResult.ok("build", f"Built {len(binaries)} binaries", binaries)


class BinaryPostProcessor:
    """Strip binaries and, where needed, merge them into one universal file."""

    def __init__(self, config: BuildConfig, runner: CommandRunner) -> None:
        self.config = config
        self.runner = runner

    def process(self, platform_key: str, binaries: Sequence[Path]) -> StageResult:
        platform = self.config.platforms[platform_key]
        if len(binaries) != len(platform.target.triples):
            return StageResult.failed(
                "post_process",
                f"Expected {len(platform.target.triples)} binaries, got {len(binaries)}",
            )

        for binary in binaries:
            stripped = StageResult.from_process("post_process", self.runner.run(["strip", binary]), f"strip {binary}")
            if not stripped.success:
                return stripped

        staged = self.config.staged_binary(platform_key)
        staged.parent.mkdir(parents=True, exist_ok=True)

        if not platform.target.is_merged:
            shutil.copy2(binaries[0], staged)
            return StageResult.ok("post_process", f"Staged {staged.name}", [staged])

        merged = StageResult.from_process(
            "post_process",
            self.runner.run(["lipo", "-create", "-output", staged, *binaries]),
            "lipo merge",
        )
        if not merged.success:
            return merged
        return self._verify_architectures(platform, staged)

    def _verify_architectures(self, platform: PlatformConfig, staged: Path) -> StageResult:
        expected = {lipo_arch(triple) for triple in platform.target.triples}
        inspected = self.runner.run(["lipo", "-archs", staged], capture_output=True)
        if inspected.returncode != 0:
            return StageResult.failed("post_process", f"Unable to inspect {staged}", inspected.returncode)
        actual = set((inspected.stdout or "").split())
        if actual != expected:
            return StageResult.failed(
                "post_process",
                f"Merged binary has architectures {sorted(actual)}, expected {sorted(expected)}",
            )
        logger.info("Merged {} into {}", ", ".join(sorted(expected)), staged.name)
        return StageResult.ok("post_process", f"Merged {staged.name}", [staged])


__all__ = ["BinaryPostProcessor", "NativeBuilder", "lipo_arch"]
