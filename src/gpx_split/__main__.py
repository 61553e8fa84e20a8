"""Module entry point: python -m gpx_split ..."""

from __future__ import annotations

from gpx_split.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
