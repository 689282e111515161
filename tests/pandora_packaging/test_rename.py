"""Tests for artifact renaming."""

from __future__ import annotations

from pandora_packaging.build_config import BuildConfig
from pandora_packaging.rename import ArtifactRenamer, final_artifact_name


def test_final_artifact_names(config: BuildConfig) -> None:
    assert final_artifact_name(config, config.platforms["macos"], "1.2.0") == "PandoraLauncher-macOS-1.2.0-Universal.dmg"
    assert final_artifact_name(config, config.platforms["windows"], "1.2.0") == "PandoraLauncher-Windows-1.2.0-x86_64.exe"
    assert (
        final_artifact_name(config, config.platforms["linux"], "1.2.0")
        == "PandoraLauncher-Linux-1.2.0-x86_64.AppImage"
    )


def test_rename_moves_installer(config: BuildConfig) -> None:
    config.dist_dir.mkdir()
    source = config.dist_dir / "pandora-launcher_1.2.0_x64-setup.exe"
    source.write_bytes(b"setup")

    result = ArtifactRenamer(config).rename(source, "windows", "1.2.0")

    assert result.success
    assert not source.exists()
    assert [path.name for path in config.dist_dir.iterdir()] == ["PandoraLauncher-Windows-1.2.0-x86_64.exe"]
    assert result.outputs[0].read_bytes() == b"setup"


def test_rename_fails_without_source(config: BuildConfig) -> None:
    config.dist_dir.mkdir()
    result = ArtifactRenamer(config).rename(config.dist_dir / "missing.exe", "windows", "1.2.0")
    assert not result.success
    assert result.returncode == 1
    assert list(config.dist_dir.iterdir()) == []


def test_discard_existing_removes_previous_artifact(config: BuildConfig) -> None:
    renamer = ArtifactRenamer(config)
    final = renamer.final_path("linux", "0.9")
    final.parent.mkdir(parents=True)
    final.write_bytes(b"old")
    keep = config.dist_dir / "PandoraLauncher-Linux-0.8-x86_64.AppImage"
    keep.write_bytes(b"older release")

    renamer.discard_existing("linux", "0.9")

    assert not final.exists()
    assert keep.exists()


def test_rename_with_unusable_version_fails(config: BuildConfig) -> None:
    config.dist_dir.mkdir()
    source = config.dist_dir / "installer.exe"
    source.write_bytes(b"setup")

    result = ArtifactRenamer(config).rename(source, "windows", "1.0/nested")

    assert not result.success
    assert source.exists()
