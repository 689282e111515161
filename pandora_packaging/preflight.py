"""Verify the host has every tool a release build will invoke."""

from __future__ import annotations

import platform
import shutil
import sys
from dataclasses import dataclass

from loguru import logger

REQUIRED_PYTHON = (3, 11)
RELEASE_TOOLS = ("cargo", "cargo-packager", "strip")
MERGE_TOOLS = ("lipo",)
WRAPPER_TOOLS = ("javac", "jar")


@dataclass(slots=True)
class ValidationResult:
    label: str
    success: bool
    detail: str


def check_python_version() -> ValidationResult:
    current = sys.version_info
    logger.debug("Detected Python version: {}", platform.python_version())
    if current < REQUIRED_PYTHON:
        return ValidationResult(
            label="Python Version",
            success=False,
            detail=(
                "Python 3.11 or newer is required. "
                f"Detected {platform.python_version()}"
            ),
        )
    return ValidationResult(
        label="Python Version",
        success=True,
        detail=f"Python {platform.python_version()} meets requirement",
    )


def check_tool(name: str) -> ValidationResult:
    location = shutil.which(name)
    if location is None:
        return ValidationResult(label=f"Tool {name}", success=False, detail=f"{name} not found on PATH")
    return ValidationResult(label=f"Tool {name}", success=True, detail=f"{name} found at {location}")


def required_tools(platform_key: str | None, include_wrapper: bool) -> list[str]:
    tools: list[str] = []
    if platform_key is not None:
        tools.extend(RELEASE_TOOLS)
        if platform_key == "macos":
            tools.extend(MERGE_TOOLS)
    if include_wrapper:
        tools.extend(WRAPPER_TOOLS)
    return tools


def run_preflight(platform_key: str | None, include_wrapper: bool = False) -> int:
    logger.info("Starting release preflight...")
    results = [check_python_version()]
    results.extend(check_tool(tool) for tool in required_tools(platform_key, include_wrapper))

    failures = [result for result in results if not result.success]

    for result in results:
        log_method = logger.success if result.success else logger.error
        log_method("{}: {}", result.label, result.detail)

    if failures:
        logger.error("Preflight failed with {} issues", len(failures))
        return 1

    logger.success("Preflight completed successfully")
    return 0


__all__ = ["ValidationResult", "check_python_version", "check_tool", "required_tools", "run_preflight"]
