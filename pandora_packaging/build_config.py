"""Packaging configuration dataclasses."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """Operating system plus the target triples compiled for it."""

    os: str
    triples: tuple[str, ...]

    @property
    def is_merged(self) -> bool:
        return len(self.triples) > 1


@dataclass(slots=True)
class PlatformConfig:
    """Platform-specific build settings."""

    name: str
    target: BuildTarget
    arch_tag: str
    installer_suffix: str
    formats: list[str]
    update_arch: str
    install_type: str
    binary_suffix: str = ""
    bundle_suffix: Optional[str] = None


@dataclass(slots=True)
class WrapperConfig:
    """Location and pinned toolchain of the LaunchWrapper supervisor build."""

    source_dir: Path
    source_file: str = "com/moulberry/pandora/LaunchWrapper.java"
    class_file: str = "com/moulberry/pandora/LaunchWrapper.class"
    manifest_file: str = "manifest.txt"
    archive_name: str = "LaunchWrapper.jar"
    required_version: str = "1.8"
    compiler: str = "javac"
    archiver: str = "jar"

    @property
    def archive_path(self) -> Path:
        return self.source_dir / self.archive_name


@dataclass(slots=True)
class BuildConfig:
    """Top-level configuration describing build targets."""

    product_name: str
    internal_name: str
    artifact_stem: str
    identifier: str
    binary_name: str
    base_dir: Path
    dist_dir: Path
    build_dir: Path
    wrapper: WrapperConfig
    icons: list[str] = field(default_factory=list)
    download_base_url: Optional[str] = None
    platforms: Dict[str, PlatformConfig] = field(default_factory=dict)

    @property
    def update_dir(self) -> Path:
        return self.build_dir / "update"

    def staging_dir(self, platform_key: str) -> Path:
        return self.build_dir / "staging" / platform_key

    def staged_binary(self, platform_key: str) -> Path:
        platform = self.platforms[platform_key]
        name = f"{self.artifact_stem}-{platform.name}{platform.binary_suffix}"
        return self.staging_dir(platform_key) / name

    @classmethod
    def default(cls, base_dir: Path) -> "BuildConfig":
        platforms = {
            "macos": PlatformConfig(
                name="macOS",
                target=BuildTarget("macos", ("x86_64-apple-darwin", "aarch64-apple-darwin")),
                arch_tag="Universal",
                installer_suffix=".dmg",
                formats=["app", "dmg"],
                update_arch="universal",
                install_type="app",
                bundle_suffix=".app",
            ),
            "windows": PlatformConfig(
                name="Windows",
                target=BuildTarget("windows", ("x86_64-pc-windows-msvc",)),
                arch_tag="x86_64",
                installer_suffix=".exe",
                formats=["nsis"],
                update_arch="x86_64",
                install_type="executable",
                binary_suffix=".exe",
            ),
            "linux": PlatformConfig(
                name="Linux",
                target=BuildTarget("linux", ("x86_64-unknown-linux-gnu",)),
                arch_tag="x86_64",
                installer_suffix=".AppImage",
                formats=["appimage"],
                update_arch="x86_64",
                install_type="appimage",
            ),
        }
        return cls(
            product_name="Pandora Launcher",
            internal_name="pandora-launcher",
            artifact_stem="PandoraLauncher",
            identifier="com.moulberry.pandoralauncher",
            binary_name="pandora_launcher",
            base_dir=base_dir,
            dist_dir=base_dir / "dist",
            build_dir=base_dir / "build",
            wrapper=WrapperConfig(source_dir=base_dir / "wrapper"),
            icons=["package/icon_32x32.png"],
            platforms=platforms,
        )

    @classmethod
    def from_env(cls, base_dir: Path) -> "BuildConfig":
        """Build the default configuration, then apply ``PANDORA_*`` overrides.

        A ``.env`` file in ``base_dir`` is loaded first without overriding
        variables already present in the environment.
        """

        load_dotenv(base_dir / ".env", override=False)
        config = cls.default(base_dir)

        dist_dir = os.getenv("PANDORA_DIST_DIR")
        if dist_dir:
            config.dist_dir = _resolve(base_dir, dist_dir)
        build_dir = os.getenv("PANDORA_BUILD_DIR")
        if build_dir:
            config.build_dir = _resolve(base_dir, build_dir)
        wrapper_dir = os.getenv("PANDORA_WRAPPER_DIR")
        if wrapper_dir:
            config.wrapper.source_dir = _resolve(base_dir, wrapper_dir)
        compiler = os.getenv("PANDORA_JAVAC")
        if compiler:
            config.wrapper.compiler = compiler
        config.download_base_url = os.getenv("PANDORA_DOWNLOAD_BASE_URL") or None
        return config


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path
