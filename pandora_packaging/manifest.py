"""Release manifest construction and installer packaging."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .build_config import BuildConfig, PlatformConfig
from .commands import CommandRunner
from .stages import StageResult


@dataclass(slots=True)
class BinaryEntry:
    path: str
    main: bool = True


@dataclass(slots=True)
class ReleaseManifest:
    """Declarative packaging job handed to ``cargo packager``."""

    name: str
    out_dir: Path
    product_name: str
    version: str
    identifier: str
    binaries: list[BinaryEntry]
    icons: list[str]
    resources: list[str] = field(default_factory=list)
    binaries_dir: Optional[Path] = None
    formats: list[str] = field(default_factory=list)

    @classmethod
    def for_platform(
        cls,
        config: BuildConfig,
        platform: PlatformConfig,
        version: str,
        staged_binary: Path,
    ) -> "ReleaseManifest":
        return cls(
            name=config.internal_name,
            out_dir=config.dist_dir,
            product_name=config.product_name,
            version=version,
            identifier=config.identifier,
            binaries=[BinaryEntry(path=staged_binary.name, main=True)],
            icons=list(config.icons),
            binaries_dir=staged_binary.parent,
            formats=list(platform.formats),
        )

    def validate(self, base_dir: Path) -> list[str]:
        errors: list[str] = []
        main_entries = [entry for entry in self.binaries if entry.main]
        if len(self.binaries) != 1 or len(main_entries) != 1:
            errors.append("Exactly one binary marked as main is required")
        elif self.binaries_dir is not None and not (self.binaries_dir / main_entries[0].path).is_file():
            errors.append(f"Main binary {self.binaries_dir / main_entries[0].path} does not exist")
        if not self.icons:
            errors.append("At least one icon is required")
        for icon in self.icons:
            if not (base_dir / icon).is_file():
                errors.append(f"Icon {icon} does not exist")
        return errors

    def to_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "name": self.name,
            "outDir": str(self.out_dir),
            "productName": self.product_name,
            "version": self.version,
            "identifier": self.identifier,
            "resources": list(self.resources),
            "binaries": [{"path": entry.path, "main": entry.main} for entry in self.binaries],
            "icons": list(self.icons),
        }
        if self.binaries_dir is not None:
            config["binariesDir"] = str(self.binaries_dir)
        if self.formats:
            config["formats"] = list(self.formats)
        return config

    def to_json(self) -> str:
        return json.dumps(self.to_config())


class ArtifactPackager:
    """Run the packaging tool and identify the single installer it wrote.

    Installers and bundles from earlier runs that never reached the rename
    stage are cleared first, since the tool overwrites them in place and they
    would not show up as new output.
    """

    def __init__(self, config: BuildConfig, runner: CommandRunner) -> None:
        self.config = config
        self.runner = runner

    def package(self, manifest: ReleaseManifest, platform: PlatformConfig) -> StageResult:
        errors = manifest.validate(self.config.base_dir)
        if errors:
            return StageResult.failed("package", "; ".join(errors))

        out_dir = manifest.out_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        self._clear_unrenamed(out_dir, platform)
        before = set(out_dir.iterdir())

        logger.debug("Packager config: {}", manifest.to_json())
        completed = StageResult.from_process(
            "package",
            self.runner.run(["cargo", "packager", "--config", manifest.to_json()], cwd=self.config.base_dir),
            "cargo packager",
        )
        if not completed.success:
            return completed

        suffix = platform.installer_suffix
        produced = sorted(set(out_dir.iterdir()) - before)
        installers = [path for path in produced if path.name.endswith(suffix)]
        if len(installers) != 1:
            names = ", ".join(path.name for path in produced) or "nothing"
            return StageResult.failed(
                "package",
                f"Expected one {suffix} installer in {out_dir}, packager produced {names}",
            )

        installer = installers[0]
        for leftover in produced:
            if leftover == installer:
                continue
            if platform.bundle_suffix and leftover.name.endswith(platform.bundle_suffix) and manifest.binaries_dir:
                _keep_bundle(leftover, manifest.binaries_dir)
            else:
                _remove(leftover)
        logger.info("Packaged {}", installer.name)
        return StageResult.ok("package", f"Packaged {installer.name}", [installer])

    def _clear_unrenamed(self, out_dir: Path, platform: PlatformConfig) -> None:
        final_prefix = f"{self.config.artifact_stem}-{platform.name}-"
        suffixes = tuple(filter(None, [platform.installer_suffix, platform.bundle_suffix]))
        for entry in list(out_dir.iterdir()):
            if entry.name.endswith(suffixes) and not entry.name.startswith(final_prefix):
                logger.warning("Removing unrenamed packager output {}", entry.name)
                _remove(entry)


def _keep_bundle(bundle: Path, staging_dir: Path) -> None:
    """Move the app bundle next to the staged binary; the update archive is built from it."""

    target = staging_dir / bundle.name
    if target.exists():
        _remove(target)
    shutil.move(str(bundle), str(target))


def _remove(path: Path) -> None:
    logger.debug("Removing packager byproduct {}", path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


__all__ = ["ArtifactPackager", "BinaryEntry", "ReleaseManifest"]
