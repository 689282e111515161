"""CLI to rebuild LaunchWrapper.jar with the pinned javac."""

from __future__ import annotations

from pandora_packaging.cli import wrapper_main


if __name__ == "__main__":
    raise SystemExit(wrapper_main())
