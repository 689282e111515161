"""Validation script to verify the release build environment."""

from __future__ import annotations

from pandora_packaging.cli import preflight_main


if __name__ == "__main__":
    raise SystemExit(preflight_main())
