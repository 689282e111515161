"""Move installers to their predictable distribution names."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from loguru import logger

from .build_config import BuildConfig, PlatformConfig
from .stages import StageResult


def final_artifact_name(config: BuildConfig, platform: PlatformConfig, version: str) -> str:
    return f"{config.artifact_stem}-{platform.name}-{version}-{platform.arch_tag}{platform.installer_suffix}"


class ArtifactRenamer:
    def __init__(self, config: BuildConfig) -> None:
        self.config = config

    def final_path(self, platform_key: str, version: str) -> Path:
        platform = self.config.platforms[platform_key]
        return self.config.dist_dir / final_artifact_name(self.config, platform, version)

    def discard_existing(self, platform_key: str, version: str) -> None:
        """Remove a final artifact left behind by an earlier run of ``version``."""

        final = self.final_path(platform_key, version)
        if final.exists():
            logger.warning("Removing previous artifact {}", final)
            final.unlink()

    def rename(self, source: Path, platform_key: str, version: str) -> StageResult:
        if not source.exists():
            return StageResult.failed("rename", f"Nothing to rename, {source} does not exist")
        destination = self.final_path(platform_key, version)
        if os.sep in version or "/" in version:
            logger.warning("Version {!r} contains a path separator", version)
        try:
            destination.unlink(missing_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as exc:
            return StageResult.failed("rename", f"Unable to move {source.name} to {destination}: {exc}")
        logger.success("Release artifact ready: {}", destination)
        return StageResult.ok("rename", f"Renamed {source.name} to {destination.name}", [destination])


__all__ = ["ArtifactRenamer", "final_artifact_name"]
