from pathlib import Path

import pytest

from gpx_split.errors import OutputPathError
from gpx_split.util.paths import append_index_to_name, derive_output_path, ensure_dir


@pytest.mark.parametrize(
    "base, index, expected",
    [
        ("ride.gpx", 1, "ride_1.gpx"),
        ("out/ride.gpx", 12, "out/ride_12.gpx"),
        ("my.ride.gpx", 3, "my.ride_3.gpx"),
    ],
)
def test_derive_output_path(base, index, expected):
    assert derive_output_path(Path(base), index) == Path(expected)


@pytest.mark.parametrize("base", ["ride", "out.d/ride"])
def test_derive_output_path_needs_extension(base):
    with pytest.raises(OutputPathError):
        derive_output_path(Path(base), 1)


def test_append_index_to_name():
    assert append_index_to_name("Morning ride", 2) == "Morning ride #2"
    assert append_index_to_name("", 1) == " #1"
    assert append_index_to_name(None, 1) is None


def test_ensure_dir(tmp_path: Path):
    target = tmp_path / "a" / "b"
    ensure_dir(target)
    ensure_dir(target)
    assert target.is_dir()
