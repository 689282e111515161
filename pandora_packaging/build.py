"""Build orchestration for desktop packages."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from .build_config import BuildConfig
from .commands import CommandRunner
from .manifest import ArtifactPackager, ReleaseManifest
from .native import BinaryPostProcessor, NativeBuilder
from .rename import ArtifactRenamer
from .stages import PipelineResult, PipelineState, StageResult, run_stages
from .update_manifest import write_update_manifest
from .wrapper import WrapperBuildStep


def build_target(
    config: BuildConfig,
    platform_key: str,
    version: str,
    runner: Optional[CommandRunner] = None,
) -> PipelineResult:
    if platform_key not in config.platforms:
        raise ValueError(f"Unknown platform {platform_key}")
    platform = config.platforms[platform_key]
    runner = runner or CommandRunner()
    logger.info("Building {} {} release", platform.name, version)

    builder = NativeBuilder(config, runner)
    post_processor = BinaryPostProcessor(config, runner)
    packager = ArtifactPackager(config, runner)
    renamer = ArtifactRenamer(config)

    renamer.discard_existing(platform_key, version)
    _prepare_directories(config.dist_dir, config.staging_dir(platform_key))

    def package(binaries: list[Path]) -> StageResult:
        manifest = ReleaseManifest.for_platform(config, platform, version, binaries[0])
        return packager.package(manifest, platform)

    stages = [
        (PipelineState.BUILT, lambda _: builder.build(platform)),
        (PipelineState.POST_PROCESSED, lambda binaries: post_processor.process(platform_key, binaries)),
        (PipelineState.PACKAGED, package),
        (PipelineState.RENAMED, lambda artifacts: renamer.rename(artifacts[0], platform_key, version)),
        (PipelineState.DONE, lambda artifacts: write_update_manifest(config, platform_key, version, artifacts[0])),
    ]
    result = run_stages(stages, platform=platform_key, version=version)
    if result.success:
        logger.success("{} {} release complete: {}", platform.name, version, result.artifact)
    return result


def build_release(
    version: str,
    platforms: Iterable[str] | None = None,
    base_dir: Path | None = None,
    runner: Optional[CommandRunner] = None,
) -> int:
    """Build each requested platform in turn, stopping at the first failure."""

    base_dir = base_dir or Path.cwd()
    config = BuildConfig.from_env(base_dir)
    targets = list(platforms or config.platforms.keys())
    for key in targets:
        if key not in config.platforms:
            raise ValueError(f"Unknown platform {key}")
    for key in targets:
        result = build_target(config, key, version, runner)
        if not result.success:
            return result.exit_code
    return 0


def build_wrapper(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    result = WrapperBuildStep(config.wrapper, runner or CommandRunner()).run()
    if not result.success:
        logger.error("LaunchWrapper build failed: {}", result.detail)
    return result


def _prepare_directories(output_dir: Path, staging_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    if staging_dir.exists():
        shutil.rmtree(staging_dir)
    staging_dir.mkdir(parents=True, exist_ok=True)


__all__ = ["build_release", "build_target", "build_wrapper"]
