"""Command line entry points for release builds."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .build import build_target, build_wrapper
from .build_config import BuildConfig
from .logger import setup_logging
from .preflight import run_preflight

PLATFORM_CHOICES = ("macos", "windows", "linux")


def host_platform() -> str:
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("win"):
        return "windows"
    return "linux"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Root of the launcher workspace (default: current directory)",
    )
    parser.add_argument("--log-level", default="INFO", help="Console log level")
    parser.add_argument("--log-dir", default="logs", help="Directory for the JSON log file")


def parse_release_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a versioned release installer")
    parser.add_argument("version", help="Release version embedded in the manifest and artifact name")
    parser.add_argument(
        "--platform",
        choices=PLATFORM_CHOICES,
        default=host_platform(),
        help="Platform to build (default: host platform)",
    )
    parser.add_argument("--dist-dir", type=Path, help="Override the output directory")
    parser.add_argument("--download-base-url", help="Write an update manifest pointing at this URL")
    _add_common_arguments(parser)
    return parser.parse_args(argv)


def release_main(argv: Sequence[str] | None = None) -> int:
    args = parse_release_args(argv)
    setup_logging(console_level=args.log_level, log_directory=args.log_dir)
    config = BuildConfig.from_env(args.project_dir.resolve())
    if args.dist_dir is not None:
        config.dist_dir = args.dist_dir.resolve()
    if args.download_base_url:
        config.download_base_url = args.download_base_url
    return build_target(config, args.platform, args.version).exit_code


def parse_wrapper_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the LaunchWrapper supervisor archive")
    parser.add_argument("--wrapper-dir", type=Path, help="Directory holding the wrapper sources")
    _add_common_arguments(parser)
    return parser.parse_args(argv)


def wrapper_main(argv: Sequence[str] | None = None) -> int:
    args = parse_wrapper_args(argv)
    setup_logging(console_level=args.log_level, log_directory=args.log_dir)
    config = BuildConfig.from_env(args.project_dir.resolve())
    if args.wrapper_dir is not None:
        config.wrapper.source_dir = args.wrapper_dir.resolve()
    result = build_wrapper(config)
    return 0 if result.success else result.returncode


def parse_preflight_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check the host for release build tools")
    parser.add_argument("--platform", choices=PLATFORM_CHOICES, help="Check tools for this platform's release")
    parser.add_argument("--wrapper", action="store_true", help="Check tools for the LaunchWrapper build")
    return parser.parse_args(argv)


def preflight_main(argv: Sequence[str] | None = None) -> int:
    args = parse_preflight_args(argv)
    platform_key = args.platform
    if platform_key is None and not args.wrapper:
        platform_key = host_platform()
    return run_preflight(platform_key, include_wrapper=args.wrapper)


__all__ = ["host_platform", "preflight_main", "release_main", "wrapper_main"]
