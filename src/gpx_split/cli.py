#!/usr/bin/env python3
"""
gpx-split: split a GPX route or track into several files.

Examples:
    gpx-split ride.gpx -m points -x 500
    gpx-split ride.gpx -o out/ride.gpx -m length -x 25000
    gpx-split tour.gpx -k route -m location -x 50 -p stops.gpx

Defaults for kind/mode/max come from the gpx-split configuration
(see gpx_split.config); flags given here always win.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from time import perf_counter
from typing import Optional

from gpx_split.config import load_config
from gpx_split.errors import ConfigError, GpxSplitError
from gpx_split.formats.gpx import read_gpx
from gpx_split.split.context import Context
from gpx_split.split.limit import MODES, create_limit
from gpx_split.split.splitter import KINDS, Splitter, kind_for
from gpx_split.util.logging import log, set_verbose


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gpx-split",
        description="Split a GPX route or track into several files.",
    )
    ap.add_argument("input", type=Path, help="GPX file to split.")
    ap.add_argument("-o", "--output", type=Path, default=None,
                    help="Output path template; fragment i is written to <stem>_<i><ext> "
                         "(default: next to the input).")
    ap.add_argument("-k", "--kind", choices=KINDS, default=None,
                    help="Split routes or tracks (default: from config, else track).")
    ap.add_argument("-m", "--mode", choices=MODES, default=None,
                    help="Splitting mode (default: from config, else points).")
    ap.add_argument("-x", "--max", type=float, default=None,
                    help="Maximum: points per file, meters per file, or meters from a "
                         "location (by mode).")
    ap.add_argument("-p", "--pois", type=Path, default=None,
                    help="GPX file whose waypoints are the cut locations (location mode; "
                         "default: the input's own waypoints).")
    ap.add_argument("--workers", type=int, default=None,
                    help="Number of writer threads.")
    ap.add_argument("--compact", action="store_true",
                    help="Do not indent the written XML.")
    ap.add_argument("--timing", action="store_true",
                    help="Print elapsed time and file count.")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Print where the track was cut.")
    return ap


def run(args: argparse.Namespace) -> int:
    """Resolve settings, split, and return the number of files written."""
    cfg = load_config()

    kind = args.kind or cfg.kind
    mode = args.mode or cfg.mode
    max_value = args.max if args.max is not None else cfg.max
    workers: Optional[int] = args.workers if args.workers is not None else cfg.workers
    pretty = cfg.pretty and not args.compact
    if workers is not None and workers < 1:
        raise ConfigError(f"--workers must be at least 1 (got {workers})")

    candidates = None
    if mode == "location":
        candidates = read_gpx(args.pois or args.input).waypoints

    limit = create_limit(mode, max_value, candidates=candidates, model=cfg.model)
    splitter = Splitter(kind_for(kind), limit, pretty=pretty, workers=workers)
    return Context(args.input, splitter, args.output).run()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_verbose(args.verbose)

    started = perf_counter()
    try:
        count = run(args)
    except GpxSplitError as e:
        raise SystemExit(f"gpx-split: {e}") from e

    if args.timing or args.verbose:
        log(f"{args.input}: {count} file(s) written in {perf_counter() - started:.3f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
