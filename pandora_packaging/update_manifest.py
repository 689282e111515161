"""Self-update manifest published alongside each release artifact."""

from __future__ import annotations

import hashlib
import json
import shutil
import tarfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .build_config import BuildConfig, PlatformConfig
from .rename import final_artifact_name
from .stages import StageResult


@dataclass(slots=True)
class UpdateDownload:
    download: str
    size: int
    sha1: str
    sig: str = ""


def sha1_digest(file_path: Path) -> str:
    digest = hashlib.sha1()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def archive_bundle(bundle: Path, target: Path) -> Path:
    """Write ``bundle`` as a gzipped tarball with the ``.app`` folder at its root."""

    with tarfile.open(target, "w:gz") as archive:
        archive.add(bundle, arcname=bundle.name)
    return target


def prepare_update_payload(
    config: BuildConfig,
    platform_key: str,
    version: str,
    artifact: Path,
) -> Optional[Path]:
    """Return the file the launcher's updater installs for this platform.

    ``app`` installs unpack a ``.app.tar.gz`` over the current bundle and
    ``executable`` installs replace the running binary, so neither can use
    the installer. AppImage installs replace the AppImage itself.
    """

    platform = config.platforms[platform_key]
    stem = final_artifact_name(config, platform, version).removesuffix(platform.installer_suffix)
    staging_dir = config.staging_dir(platform_key)

    if platform.install_type == "app":
        bundles = sorted(staging_dir.glob(f"*{platform.bundle_suffix}")) if platform.bundle_suffix else []
        if len(bundles) != 1:
            return None
        return archive_bundle(bundles[0], config.update_dir / f"{stem}{platform.bundle_suffix}.tar.gz")

    if platform.install_type == "executable":
        staged = config.staged_binary(platform_key)
        if not staged.is_file():
            return None
        target = config.update_dir / f"{stem}-update{platform.binary_suffix}"
        shutil.copy2(staged, target)
        return target

    return artifact if artifact.is_file() else None


def build_update_manifest(
    platform: PlatformConfig,
    version: str,
    payload: Path,
    download_base_url: str,
) -> dict[str, Any]:
    """Describe ``payload`` in the shape the launcher's updater reads.

    The launcher looks up ``downloads[<arch>][<install type>]``; ``sig`` is
    filled in by the external signing step.
    """

    entry = UpdateDownload(
        download=f"{download_base_url.rstrip('/')}/{payload.name}",
        size=payload.stat().st_size,
        sha1=sha1_digest(payload),
    )
    return {
        "version": version,
        "downloads": {platform.update_arch: {platform.install_type: asdict(entry)}},
    }


def write_update_manifest(
    config: BuildConfig,
    platform_key: str,
    version: str,
    artifact: Path,
) -> StageResult:
    if not config.download_base_url:
        return StageResult.ok("update_manifest", "No download base URL configured; skipped")

    platform = config.platforms[platform_key]
    config.update_dir.mkdir(parents=True, exist_ok=True)
    payload = prepare_update_payload(config, platform_key, version, artifact)
    if payload is None:
        return StageResult.failed("update_manifest", f"No {platform.install_type} update payload for {platform.name}")

    manifest = build_update_manifest(platform, version, payload, config.download_base_url)
    manifest_path = config.update_dir / f"update_{platform_key}.json"
    manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    logger.info("Wrote update manifest {} for {}", manifest_path, payload.name)
    return StageResult.ok("update_manifest", f"Wrote {manifest_path.name}", [manifest_path, payload])


__all__ = [
    "UpdateDownload",
    "archive_bundle",
    "build_update_manifest",
    "prepare_update_payload",
    "sha1_digest",
    "write_update_manifest",
]
