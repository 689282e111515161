"""Release packaging utilities for Pandora Launcher."""

from importlib.metadata import PackageNotFoundError, version

from .build import build_release, build_target, build_wrapper
from .build_config import BuildConfig, BuildTarget, PlatformConfig, WrapperConfig

try:
    __version__ = version("pandora-packaging")
except PackageNotFoundError:  # pragma: no cover - package metadata absent in dev
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "build_release",
    "build_target",
    "build_wrapper",
    "BuildConfig",
    "BuildTarget",
    "PlatformConfig",
    "WrapperConfig",
]
