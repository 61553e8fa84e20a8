# gpx_split/formats/gpx.py
"""
GPX helpers for gpx-split

This module is intentionally format-focused:
- GPX namespace handling
- safely reading and writing ElementTree
- a small typed model (Gpx / Route / Track / Waypoint) that the splitter works on

Key design principle:
  Keep splitting policy (limits, fragment bookkeeping, file naming) out of here.
  Anything this module does not understand is carried along as raw elements
  (`extra`) so that a read -> write round trip keeps it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpx_split.errors import InputError, WriteError
from gpx_split.util.paths import ensure_dir

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

ET.register_namespace("xsi", XSI_NS)

# Waypoint children that come after <name> in the GPX schema sequence.
_WPT_AFTER_NAME = frozenset({
    "cmt", "desc", "src", "link", "sym", "type", "fix", "sat", "hdop", "vdop",
    "pdop", "ageofdgpsdata", "dgpsid", "extensions",
})


def qn(tag: str, ns: str = GPX_NS["gpx"]) -> str:
    """
    Build an ElementTree-qualified name for a GPX tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return f"{{{ns}}}{tag}" if ns else tag


def _split_tag(tag: str) -> tuple[str, str]:
    """Return (namespace, local name) of an ElementTree tag."""
    if tag.startswith("{"):
        ns, _, local = tag[1:].partition("}")
        return ns, local
    return "", tag


def _local(tag: str) -> str:
    return _split_tag(tag)[1]


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Waypoint:
    lat: float
    lon: float
    name: Optional[str] = None
    extra: tuple[ET.Element, ...] = field(default=(), compare=False, repr=False)


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


@dataclass
class Route:
    name: Optional[str] = None
    points: list[Waypoint] = field(default_factory=list)
    extra: list[ET.Element] = field(default_factory=list, repr=False)


@dataclass
class Track:
    name: Optional[str] = None
    segments: list[list[Waypoint]] = field(default_factory=list)
    extra: list[ET.Element] = field(default_factory=list, repr=False)


@dataclass
class Metadata:
    bounds: Optional[Bounds] = None
    extra: list[ET.Element] = field(default_factory=list, repr=False)


@dataclass
class Gpx:
    """One GPX document: the unit that is read from and written to disk."""
    version: str = "1.1"
    creator: str = "gpx-split"
    namespace: str = GPX_NS["gpx"]
    attrib: dict[str, str] = field(default_factory=dict)
    metadata: Optional[Metadata] = None
    waypoints: list[Waypoint] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)
    tracks: list[Track] = field(default_factory=list)
    extra: list[ET.Element] = field(default_factory=list, repr=False)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------
def _text(elem: ET.Element) -> Optional[str]:
    s = (elem.text or "").strip()
    return s or None


def _parse_bounds(elem: ET.Element) -> Bounds:
    try:
        return Bounds(
            min_lat=float(elem.get("minlat")),
            min_lon=float(elem.get("minlon")),
            max_lat=float(elem.get("maxlat")),
            max_lon=float(elem.get("maxlon")),
        )
    except (TypeError, ValueError) as e:
        raise InputError(f"Invalid <bounds> element ({e})") from e


def _parse_point(elem: ET.Element) -> Waypoint:
    try:
        lat = float(elem.get("lat"))
        lon = float(elem.get("lon"))
    except (TypeError, ValueError) as e:
        raise InputError(f"Invalid coordinates on <{_local(elem.tag)}> ({e})") from e
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        # also rejects NaN
        raise InputError(f"Coordinates out of range on <{_local(elem.tag)}>: lat={lat}, lon={lon}")

    name = None
    extra = []
    for child in elem:
        if _local(child.tag) == "name":
            name = _text(child)
        else:
            extra.append(child)
    return Waypoint(lat=lat, lon=lon, name=name, extra=tuple(extra))


def _parse_route(elem: ET.Element) -> Route:
    rte = Route()
    for child in elem:
        tag = _local(child.tag)
        if tag == "name":
            rte.name = _text(child)
        elif tag == "rtept":
            rte.points.append(_parse_point(child))
        else:
            rte.extra.append(child)
    return rte


def _parse_track(elem: ET.Element) -> Track:
    trk = Track()
    for child in elem:
        tag = _local(child.tag)
        if tag == "name":
            trk.name = _text(child)
        elif tag == "trkseg":
            trk.segments.append(
                [_parse_point(p) for p in child if _local(p.tag) == "trkpt"]
            )
        else:
            trk.extra.append(child)
    return trk


def _parse_metadata(elem: ET.Element) -> Metadata:
    md = Metadata()
    for child in elem:
        if _local(child.tag) == "bounds":
            md.bounds = _parse_bounds(child)
        else:
            md.extra.append(child)
    return md


def parse_gpx(root: ET.Element) -> Gpx:
    """Build a Gpx model from a parsed <gpx> root element."""
    ns, local = _split_tag(root.tag)
    if local != "gpx":
        raise InputError(f"Not a GPX document (root element <{local}>)")

    attrib = {k: v for k, v in root.attrib.items() if k not in ("version", "creator")}
    gpx = Gpx(
        version=root.get("version", "1.1"),
        creator=root.get("creator", "gpx-split"),
        namespace=ns,
        attrib=attrib,
    )

    for child in root:
        tag = _local(child.tag)
        if tag == "metadata":
            gpx.metadata = _parse_metadata(child)
        elif tag == "wpt":
            gpx.waypoints.append(_parse_point(child))
        elif tag == "rte":
            gpx.routes.append(_parse_route(child))
        elif tag == "trk":
            gpx.tracks.append(_parse_track(child))
        else:
            gpx.extra.append(child)
    return gpx


def read_gpx(path: Path) -> Gpx:
    """
    Read a GPX file into the Gpx model.

    Raises:
      InputError (wrapping ET.ParseError / OSError)
    """
    try:
        tree = ET.parse(path)
    except (OSError, ET.ParseError) as e:
        raise InputError(f"Failed to read GPX: {path} ({e})") from e

    return parse_gpx(tree.getroot())


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------
def _fmt_coord(v: float) -> str:
    """Plain decimal notation (no exponent), trailing zeros trimmed."""
    s = f"{v:.9f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def _name_element(ns: str, name: str) -> ET.Element:
    e = ET.Element(qn("name", ns))
    e.text = name
    return e


def _point_element(ns: str, tag: str, p: Waypoint) -> ET.Element:
    elem = ET.Element(qn(tag, ns), {"lat": _fmt_coord(p.lat), "lon": _fmt_coord(p.lon)})
    children = [copy.deepcopy(c) for c in p.extra]
    if p.name is not None:
        pos = next(
            (i for i, c in enumerate(children) if _local(c.tag) in _WPT_AFTER_NAME),
            len(children),
        )
        children.insert(pos, _name_element(ns, p.name))
    elem.extend(children)
    return elem


def _bounds_element(ns: str, b: Bounds) -> ET.Element:
    return ET.Element(qn("bounds", ns), {
        "minlat": _fmt_coord(b.min_lat),
        "minlon": _fmt_coord(b.min_lon),
        "maxlat": _fmt_coord(b.max_lat),
        "maxlon": _fmt_coord(b.max_lon),
    })


def _metadata_element(ns: str, md: Metadata) -> ET.Element:
    elem = ET.Element(qn("metadata", ns))
    children = [copy.deepcopy(c) for c in md.extra]
    if md.bounds is not None:
        # <bounds> precedes <extensions> in the schema sequence.
        pos = next(
            (i for i, c in enumerate(children) if _local(c.tag) == "extensions"),
            len(children),
        )
        children.insert(pos, _bounds_element(ns, md.bounds))
    elem.extend(children)
    return elem


def _route_element(ns: str, rte: Route) -> ET.Element:
    elem = ET.Element(qn("rte", ns))
    if rte.name is not None:
        elem.append(_name_element(ns, rte.name))
    elem.extend(copy.deepcopy(c) for c in rte.extra)
    elem.extend(_point_element(ns, "rtept", p) for p in rte.points)
    return elem


def _track_element(ns: str, trk: Track) -> ET.Element:
    elem = ET.Element(qn("trk", ns))
    if trk.name is not None:
        elem.append(_name_element(ns, trk.name))
    elem.extend(copy.deepcopy(c) for c in trk.extra)
    for seg in trk.segments:
        seg_elem = ET.SubElement(elem, qn("trkseg", ns))
        seg_elem.extend(_point_element(ns, "trkpt", p) for p in seg)
    return elem


def to_element(gpx: Gpx) -> ET.Element:
    """
    Build a fresh <gpx> element tree for `gpx`.

    Raw `extra` elements are deep-copied so the returned tree shares nothing
    with the model (several fragments of one source are written concurrently).
    """
    ns = gpx.namespace
    root = ET.Element(qn("gpx", ns), {"version": gpx.version, "creator": gpx.creator})
    root.attrib.update(gpx.attrib)
    if gpx.metadata is not None:
        root.append(_metadata_element(ns, gpx.metadata))
    root.extend(_point_element(ns, "wpt", w) for w in gpx.waypoints)
    root.extend(_route_element(ns, r) for r in gpx.routes)
    root.extend(_track_element(ns, t) for t in gpx.tracks)
    root.extend(copy.deepcopy(c) for c in gpx.extra)
    return root


def _unqualify(root: ET.Element, ns: str) -> None:
    """
    Strip the document namespace from all tags and declare it as the default
    namespace on the root, so it serializes as plain <gpx xmlns="..."> without
    touching ElementTree's process-wide prefix map.
    """
    if not ns:
        return
    prefix = f"{{{ns}}}"
    for elem in root.iter():
        if isinstance(elem.tag, str) and elem.tag.startswith(prefix):
            elem.tag = elem.tag[len(prefix):]
    root.set("xmlns", ns)


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Eliminates double blank-line
    issues by explicitly controlling .text/.tail.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def write_gpx(gpx: Gpx, out_path: Path, *, pretty: bool = True) -> None:
    """
    Write a Gpx model to disk.

    - pretty=True applies indentation for human readability
    - writes UTF-8 with XML declaration
    - creates missing parent directories

    Raises:
      WriteError (wrapping OSError)
    """
    root = to_element(gpx)
    _unqualify(root, gpx.namespace)
    if pretty:
        _indent(root)
    out_path = Path(out_path)
    try:
        ensure_dir(out_path.parent)
        ET.ElementTree(root).write(out_path, encoding="utf-8", xml_declaration=True)
    except OSError as e:
        raise WriteError(f"Failed to write GPX: {out_path} ({e})") from e
