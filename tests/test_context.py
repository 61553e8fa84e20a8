import pytest

from gpx_split.errors import InputError, OutputPathError
from gpx_split.formats.gpx import read_gpx
from gpx_split.split.context import Context
from gpx_split.split.limit import LengthLimit, LocationLimit, PointsLimit
from gpx_split.split.splitter import RouteKind, Splitter, TrackKind


def test_track_points(gpx_copy):
    src = gpx_copy("track_p.gpx")
    count = Context(src, Splitter(TrackKind(), PointsLimit(10))).run()
    assert count == 2

    first = read_gpx(src.with_name("track_p_1.gpx"))
    second = read_gpx(src.with_name("track_p_2.gpx"))
    assert not src.with_name("track_p_3.gpx").exists()

    for i, doc in enumerate((first, second), start=1):
        assert len(doc.tracks) == 1
        trk = doc.tracks[0]
        assert trk.name == f"Morning ride #{i}"
        assert len(trk.segments) == 1
        assert len(trk.segments[0]) == 10

    assert first.tracks[0].segments[0][-1] == second.tracks[0].segments[0][0]
    assert first.metadata.bounds.min_lon == 10.0
    assert first.metadata.bounds.max_lon == 10.009
    assert second.metadata.bounds.min_lon == 10.009
    assert second.metadata.bounds.max_lon == 10.018


def test_track_points_keeps_point_and_trace_details(gpx_copy):
    src = gpx_copy("track_p.gpx")
    Context(src, Splitter(TrackKind(), PointsLimit(10))).run()

    text = src.with_name("track_p_2.gpx").read_text(encoding="utf-8")
    assert "<type>cycling</type>" in text
    assert "<ele>39</ele>" in text
    assert "<time>2024-05-01T08:18:00Z</time>" in text


@pytest.mark.parametrize("max_m, expected", [(1000.0, 3), (5000.0, 0)])
def test_track_length(gpx_copy, max_m, expected):
    src = gpx_copy("track_l.gpx")
    count = Context(src, Splitter(TrackKind(), LengthLimit(max_m))).run()
    assert count == expected
    assert len(list(src.parent.glob("track_l_*.gpx"))) == expected


def test_route_location_with_embedded_waypoints(gpx_copy):
    src = gpx_copy("route_l.gpx")
    limit = LocationLimit(read_gpx(src).waypoints, 50.0)
    count = Context(src, Splitter(RouteKind(), limit)).run()

    assert count == 3
    assert limit.candidates == []

    routes = [read_gpx(src.with_name(f"route_l_{i}.gpx")).routes[0] for i in (1, 2, 3)]
    assert [r.name for r in routes] == ["City tour #1", "City tour #2", "City tour #3"]
    assert routes[0].points[-1].name == "nearby Bakery"
    assert routes[1].points[0].name == "nearby Bakery"
    assert routes[1].points[-1].name == "nearby Fountain"
    assert [len(r.points) for r in routes] == [12, 6, 9]


def test_route_location_with_separate_pois(gpx_copy, data_dir):
    src = gpx_copy("route_l.gpx")
    limit = LocationLimit(read_gpx(data_dir / "pois.gpx").waypoints, 50.0)
    assert Context(src, Splitter(RouteKind(), limit)).run() == 2


def test_output_template(gpx_copy, tmp_path):
    src = gpx_copy("route_p.gpx")
    out = tmp_path / "out" / "short.gpx"
    assert Context(src, Splitter(RouteKind(), PointsLimit(2)), out).run() == 3
    assert sorted(p.name for p in out.parent.iterdir()) == ["short_1.gpx", "short_2.gpx", "short_3.gpx"]


def test_wrong_kind_writes_nothing(gpx_copy):
    src = gpx_copy("route_p.gpx")
    assert Context(src, Splitter(TrackKind(), PointsLimit(2))).run() == 0
    assert list(src.parent.iterdir()) == [src]


def test_missing_and_malformed_input(tmp_path, data_dir):
    with pytest.raises(InputError):
        Context(tmp_path / "nope.gpx", Splitter(TrackKind(), PointsLimit(2))).run()
    with pytest.raises(InputError):
        Context(data_dir / "broken.gpx", Splitter(TrackKind(), PointsLimit(2))).run()


def test_output_path_without_extension(gpx_copy, tmp_path):
    src = gpx_copy("route_p.gpx")
    with pytest.raises(OutputPathError):
        Context(src, Splitter(RouteKind(), PointsLimit(2)), tmp_path / "out").run()
    assert list(tmp_path.iterdir()) == [src]
