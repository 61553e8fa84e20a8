# gpx_split/split/splitter.py
"""
Splitting of routes and tracks into fragments, and writing of the fragments.

The algorithm is the same for routes and tracks; what differs is how points
are read from a trace and how a trace is rebuilt around new points. That
difference lives in the two "kinds" below, and a Splitter is built with one.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence, Union

from gpx_split.formats.gpx import Gpx, Route, Track, Waypoint, write_gpx
from gpx_split.geo.geodesy import fit_bounds
from gpx_split.split.limit import Limit
from gpx_split.util.logging import debug
from gpx_split.util.paths import append_index_to_name, derive_output_path

Trace = Union[Route, Track]

KINDS = ("route", "track")


class RouteKind:
    """Routes: points are held directly by the <rte>."""

    label = "route"

    def traces(self, gpx: Gpx) -> list[Route]:
        return gpx.routes

    def points(self, trace: Route) -> list[Waypoint]:
        return trace.points

    def with_points(self, trace: Route, points: Sequence[Waypoint]) -> Route:
        return replace(trace, points=list(points))

    def rename(self, trace: Route, name: Optional[str]) -> Route:
        return replace(trace, name=name)

    def place(self, gpx: Gpx, trace: Route) -> Gpx:
        return replace(gpx, routes=[trace], tracks=[])


class TrackKind:
    """Tracks: segments are flattened; a fragment has a single segment."""

    label = "track"

    def traces(self, gpx: Gpx) -> list[Track]:
        return gpx.tracks

    def points(self, trace: Track) -> list[Waypoint]:
        return [p for seg in trace.segments for p in seg]

    def with_points(self, trace: Track, points: Sequence[Waypoint]) -> Track:
        return replace(trace, segments=[list(points)])

    def rename(self, trace: Track, name: Optional[str]) -> Track:
        return replace(trace, name=name)

    def place(self, gpx: Gpx, trace: Track) -> Gpx:
        return replace(gpx, tracks=[trace], routes=[])


def kind_for(label: str):
    """Return the trace kind for "route" or "track"."""
    if label == "route":
        return RouteKind()
    if label == "track":
        return TrackKind()
    raise ValueError(f"Unknown trace kind: {label!r}")


class Splitter:
    """
    Split the routes (or tracks) of a document with a limit, then write each
    fragment to its own file.

    Args:
      kind:    RouteKind() or TrackKind()
      limit:   the Limit deciding where to cut
      pretty:  indent the written XML
      workers: thread pool size for writing (None = executor default)
    """

    def __init__(self, kind, limit: Limit, *, pretty: bool = True, workers: Optional[int] = None):
        self.kind = kind
        self.limit = limit
        self.pretty = pretty
        self.workers = workers

    def traces(self, gpx: Gpx) -> list[Trace]:
        return self.kind.traces(gpx)

    def split(self, traces: Sequence[Trace]) -> list[Trace]:
        """
        Walk all points of `traces` in order and cut wherever the limit says so.

        Consecutive fragments share their boundary point. Each fragment keeps the
        non-point data (name, description, ...) of the trace its last point came
        from. A leftover of fewer than 2 points is dropped.
        """
        fragments: list[Trace] = []
        acc: list[Waypoint] = []

        for trace in traces:
            for p in self.kind.points(trace):
                acc.append(p)
                if self.limit.exceeds(acc):
                    fragments.append(self.kind.with_points(trace, acc))
                    debug(f"{self.kind.label} fragment {len(fragments)}: {len(acc)} points")
                    acc = [acc[-1]]

        if len(acc) > 1:
            fragments.append(self.kind.with_points(traces[-1], acc))
            debug(f"{self.kind.label} fragment {len(fragments)}: {len(acc)} points (rest)")

        return fragments

    def write(self, gpx: Gpx, fragment: Trace, index: int, base_path: Path) -> Path:
        """
        Write one fragment as its own document.

        The document is `gpx` holding only this fragment, whose name gets
        " #<index>" appended; bounds are refit when `gpx` had bounds. The file
        goes to `base_path` with "_<index>" inserted before the extension.
        """
        out_path = derive_output_path(base_path, index)
        fragment = self.kind.rename(fragment, append_index_to_name(fragment.name, index))
        doc = fit_bounds(self.kind.place(gpx, fragment), self.kind.points(fragment))
        write_gpx(doc, out_path, pretty=self.pretty)
        return out_path

    def write_all(self, gpx: Gpx, fragments: Sequence[Trace], base_path: Path) -> list[Path]:
        """
        Write all fragments concurrently, one task per fragment (1-based index).

        Every task runs to completion; afterwards the first failure in fragment
        order is raised. Files written by the other tasks are left in place.
        """
        # Fails fast on a bad base path, before anything touches the disk.
        derive_output_path(base_path, 1)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = [
                pool.submit(self.write, gpx, fragment, index, base_path)
                for index, fragment in enumerate(fragments, start=1)
            ]

        first_error: Optional[BaseException] = None
        written: list[Path] = []
        for fut in futures:
            exc = fut.exception()
            if exc is None:
                written.append(fut.result())
            elif first_error is None:
                first_error = exc

        if first_error is not None:
            raise first_error
        return written
