# gpx_split/split/limit.py
"""
Conditions under which a route or track must be cut.

A limit is asked `exceeds(accumulator)` every time the splitter appends a
point. PointsLimit and LengthLimit only read the accumulator. LocationLimit
owns a pool of candidate cut locations, consumes one per cut, and moves the
accumulator's last point onto the cut location.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from gpx_split.errors import ConfigError
from gpx_split.formats.gpx import Waypoint
from gpx_split.geo.geodesy import MODELS, cumulative_distance, distance, interception_point, is_near_segment
from gpx_split.util.logging import debug

MODES = ("points", "length", "location")


class Limit:
    """Base class: never cuts."""

    def exceeds(self, points: list[Waypoint]) -> bool:
        return False


class PointsLimit(Limit):
    """Cut once the accumulator holds `max` points."""

    def __init__(self, max: int):
        self.max = max

    def exceeds(self, points: list[Waypoint]) -> bool:
        return len(points) >= self.max

    def __repr__(self) -> str:
        return f"PointsLimit(max={self.max})"


class LengthLimit(Limit):
    """Cut once the path through the accumulator is longer than `max` meters."""

    def __init__(self, max: float, model: str = "wgs84"):
        self.max = max
        self.model = model

    def exceeds(self, points: list[Waypoint]) -> bool:
        return cumulative_distance(points, self.model) > self.max

    def __repr__(self) -> str:
        return f"LengthLimit(max={self.max}, model={self.model!r})"


class LocationLimit(Limit):
    """
    Cut where the path passes within `max_distance` meters of a candidate.

    Only the newest segment of the accumulator is tested. When several
    candidates qualify the closest one wins; distances are compared at
    millimetre resolution and on a tie the earlier candidate wins. The
    winning candidate is removed from the pool, so each location cuts at most
    once per run.
    """

    def __init__(self, candidates: Iterable[Waypoint], max_distance: float):
        self.candidates: list[Waypoint] = list(candidates)
        self.max_distance = max_distance

    def exceeds(self, points: list[Waypoint]) -> bool:
        if len(points) < 2 or not self.candidates:
            return False

        segment = (points[-2], points[-1])
        # millimetres -> (candidate index, interception point); first wins
        found: dict[int, tuple[int, Waypoint]] = {}
        for idx, candidate in enumerate(self.candidates):
            ip = interception_point(candidate, segment)
            if not is_near_segment(ip, segment, self.max_distance):
                continue
            d = distance(candidate, ip)
            if d >= self.max_distance:
                continue
            found.setdefault(int(d * 1000), (idx, ip))

        if not found:
            return False

        key = min(found)
        idx, ip = found[key]
        candidate = self.candidates.pop(idx)
        name = f"nearby {candidate.name}" if candidate.name else None
        points[-1] = Waypoint(lat=ip.lat, lon=ip.lon, name=name)
        debug(f"cut at {ip.lat:.7f},{ip.lon:.7f} ({key / 1000:.1f} m from {candidate.name or 'candidate'})")
        return True

    def __repr__(self) -> str:
        return f"LocationLimit(candidates={len(self.candidates)}, max_distance={self.max_distance})"


def create_limit(
        mode: str,
        max: float, *,
        candidates: Optional[Iterable[Waypoint]] = None,
        model: str = "wgs84",
) -> Limit:
    """
    Build the limit for a splitting mode.

      points   -> PointsLimit(int(max))
      length   -> LengthLimit(max meters, distance model)
      location -> LocationLimit(candidates, max meters)

    Raises:
      ConfigError for an unknown mode/model or a nonsensical maximum.
    """
    if not math.isfinite(max):
        raise ConfigError(f"Maximum must be a finite number (got {max})")
    if max <= 0:
        raise ConfigError(f"Maximum must be positive (got {max})")

    if mode == "points":
        # a 1-point limit would emit a first fragment holding a single point
        if int(max) < 2:
            raise ConfigError(f"A points limit needs at least 2 points (got {max})")
        return PointsLimit(int(max))
    if mode == "length":
        if model not in MODELS:
            raise ConfigError(f"Unknown distance model: {model!r} (expected one of {', '.join(MODELS)})")
        return LengthLimit(float(max), model=model)
    if mode == "location":
        return LocationLimit(candidates or [], float(max))
    raise ConfigError(f"Unknown splitting mode: {mode!r} (expected one of {', '.join(MODES)})")
