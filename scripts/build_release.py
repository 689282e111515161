"""CLI to build a production release for one platform."""

from __future__ import annotations

from pandora_packaging.cli import release_main


if __name__ == "__main__":
    raise SystemExit(release_main())
