# gpx_split/geo/geodesy.py
"""
Geodesic primitives for gpx-split

All distances are in meters on the WGS-84 ellipsoid unless `model="haversine"`
is requested, which uses the spherical mean-earth-radius formula instead.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from geographiclib.geodesic import Geodesic
from geopy.distance import geodesic
from haversine import Unit, haversine

from gpx_split.formats.gpx import Bounds, Gpx, Waypoint

MODELS = ("wgs84", "haversine")

Segment = tuple[Waypoint, Waypoint]


def _latlon(p: Waypoint) -> tuple[float, float]:
    return (p.lat, p.lon)


def distance(a: Waypoint, b: Waypoint, model: str = "wgs84") -> float:
    """Distance between two waypoints in meters."""
    if model == "haversine":
        return haversine(_latlon(a), _latlon(b), unit=Unit.METERS)
    return geodesic(_latlon(a), _latlon(b)).meters


def cumulative_distance(points: Sequence[Waypoint], model: str = "wgs84") -> float:
    """Sum of the distances between consecutive points; 0.0 for fewer than 2."""
    return sum(distance(p0, p1, model) for p0, p1 in zip(points, points[1:]))


def bearing(a: Waypoint, b: Waypoint) -> float:
    """Initial azimuth (degrees clockwise from north) of the geodesic a -> b."""
    return Geodesic.WGS84.Inverse(a.lat, a.lon, b.lat, b.lon)["azi1"]


def interception_point(point: Waypoint, segment: Segment) -> Waypoint:
    """
    The point on the geodesic through `segment` considered closest to `point`.

    Computed as a bearing projection: walk from the segment start along the
    start -> end azimuth for as far as `point` is from the start. This is close
    to the true perpendicular foot only while `point` lies near the segment;
    far off-axis the result can land beyond either end, so pair it with
    is_near_segment().
    """
    a, b = segment
    azi = bearing(a, b)
    dist = distance(a, point)
    dest = geodesic(meters=dist).destination(_latlon(a), bearing=azi)
    return Waypoint(lat=dest.latitude, lon=dest.longitude)


def is_near_segment(point: Waypoint, segment: Segment, max_distance: float) -> bool:
    """
    True if `point` is on the segment, or behind one of its ends, within
    `max_distance` meters of extra path length.

    ---  line
     )   max
     +   point
    |-|  segment

    |-------------|---+-----)---  => True
    |-------+-----|---------)---  => True
    |-------------|---------)-+-  => False
    """
    a, b = segment
    excess = distance(a, point) + distance(point, b) - distance(a, b)
    return abs(excess) < max_distance


def find_bounds(points: Sequence[Waypoint]) -> Optional[Bounds]:
    """Bounding box (min/max of lat and lon) of `points`; None when empty."""
    if not points:
        return None
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return Bounds(min_lat=min(lats), min_lon=min(lons), max_lat=max(lats), max_lon=max(lons))


def fit_bounds(gpx: Gpx, points: Sequence[Waypoint]) -> Gpx:
    """
    Return a copy of `gpx` whose metadata bounds fit `points`.

    Only documents that already carry bounds get new ones; anything else is
    returned unchanged.
    """
    md = gpx.metadata
    if md is None or md.bounds is None:
        return gpx
    return replace(gpx, metadata=replace(md, bounds=find_bounds(points)))
