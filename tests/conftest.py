"""Pytest configuration and a simulated release toolchain."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pandora_packaging.build_config import BuildConfig  # noqa: E402

Handler = Callable[[list[str], Optional[Path]], subprocess.CompletedProcess]


def completed(cmd: list[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


class FakeRunner:
    """Stand-in for ``CommandRunner`` that records calls and dispatches on command prefixes."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.handlers: list[tuple[tuple[str, ...], Handler]] = []

    def on(self, *prefix: str, handler: Handler) -> None:
        # Newest registration wins so tests can override the defaults.
        self.handlers.insert(0, (prefix, handler))

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self.on(*prefix, handler=lambda cmd, cwd: completed(cmd, returncode))

    def run(
        self,
        cmd: Sequence[object],
        *,
        cwd: Optional[Path] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        args = [str(part) for part in cmd]
        self.calls.append(args)
        for prefix, handler in self.handlers:
            if tuple(args[: len(prefix)]) == prefix:
                return handler(args, cwd)
        return completed(args)

    def programs(self) -> list[str]:
        return [" ".join(call[:2]) for call in self.calls]


def _cargo_build(config: BuildConfig) -> Handler:
    def handler(cmd: list[str], cwd: Optional[Path]) -> subprocess.CompletedProcess:
        triple = cmd[cmd.index("--target") + 1]
        suffix = ".exe" if "windows" in triple else ""
        binary = Path(cwd or config.base_dir) / "target" / triple / "release" / f"{config.binary_name}{suffix}"
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_bytes(f"binary for {triple}".encode())
        return completed(cmd)

    return handler


def _lipo_create(cmd: list[str], cwd: Optional[Path]) -> subprocess.CompletedProcess:
    output = Path(cmd[cmd.index("-output") + 1])
    inputs = cmd[cmd.index("-output") + 2 :]
    output.write_bytes(b"".join(Path(path).read_bytes() for path in inputs))
    return completed(cmd)


INSTALLER_NAMES = {
    "dmg": "Pandora Launcher_{version}_universal.dmg",
    "nsis": "pandora-launcher_{version}_x64-setup.exe",
    "appimage": "pandora-launcher_{version}_x86_64.AppImage",
}


def _cargo_packager(cmd: list[str], cwd: Optional[Path]) -> subprocess.CompletedProcess:
    config = json.loads(cmd[cmd.index("--config") + 1])
    out_dir = Path(config["outDir"])
    out_dir.mkdir(parents=True, exist_ok=True)
    binary = Path(config["binariesDir"]) / config["binaries"][0]["path"]
    for fmt in config["formats"]:
        if fmt == "app":
            bundled = out_dir / f"{config['productName']}.app" / "Contents" / "MacOS" / binary.name
            bundled.parent.mkdir(parents=True, exist_ok=True)
            bundled.write_bytes(binary.read_bytes())
            continue
        installer = out_dir / INSTALLER_NAMES[fmt].format(version=config["version"])
        installer.write_bytes(b"installer:" + binary.read_bytes())
    return completed(cmd)


def _javac_compile(cmd: list[str], cwd: Optional[Path]) -> subprocess.CompletedProcess:
    source = Path(cwd) / cmd[1]
    source.with_suffix(".class").write_bytes(b"\xca\xfe\xba\xbe")
    return completed(cmd)


def _jar(cmd: list[str], cwd: Optional[Path]) -> subprocess.CompletedProcess:
    archive, manifest, class_file = cmd[2:5]
    payload = (Path(cwd) / manifest).read_bytes() + (Path(cwd) / class_file).read_bytes()
    (Path(cwd) / archive).write_bytes(payload)
    return completed(cmd)


def simulated_toolchain(config: BuildConfig, javac_banner: str = "javac 1.8.0_392\n") -> FakeRunner:
    runner = FakeRunner()
    runner.on("cargo", "build", handler=_cargo_build(config))
    runner.on("lipo", "-create", handler=_lipo_create)
    runner.on("lipo", "-archs", handler=lambda cmd, cwd: completed(cmd, stdout="x86_64 arm64\n"))
    runner.on("cargo", "packager", handler=_cargo_packager)
    runner.on(config.wrapper.compiler, handler=_javac_compile)
    runner.on(config.wrapper.compiler, "-version", handler=lambda cmd, cwd: completed(cmd, stderr=javac_banner))
    runner.on(config.wrapper.archiver, handler=_jar)
    return runner


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    build_config = BuildConfig.default(tmp_path)
    for icon in build_config.icons:
        (tmp_path / icon).parent.mkdir(parents=True, exist_ok=True)
        (tmp_path / icon).write_bytes(b"\x89PNG")
    return build_config


@pytest.fixture
def runner(config: BuildConfig) -> FakeRunner:
    return simulated_toolchain(config)


@pytest.fixture
def wrapper_sources(config: BuildConfig) -> Path:
    source_dir = config.wrapper.source_dir
    source = source_dir / config.wrapper.source_file
    source.parent.mkdir(parents=True, exist_ok=True)
    source.write_text("public class LaunchWrapper {}\n", encoding="utf-8")
    (source_dir / config.wrapper.manifest_file).write_text(
        "Main-Class: com.moulberry.pandora.LaunchWrapper\n", encoding="utf-8"
    )
    return source_dir
