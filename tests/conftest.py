import shutil
from pathlib import Path

import pytest

from gpx_split.formats.gpx import Waypoint


@pytest.fixture
def data_dir() -> Path:
    return Path(__file__).parent / "data"


@pytest.fixture
def gpx_copy(data_dir: Path, tmp_path: Path):
    """Copy a fixture GPX into tmp_path (fragments are written next to it)."""
    def _copy(name: str) -> Path:
        dest = tmp_path / name
        shutil.copy(data_dir / name, dest)
        return dest
    return _copy


def equator(*lons: float) -> list[Waypoint]:
    """Waypoints on the equator; 0.001 deg of longitude is ~111.32 m there."""
    return [Waypoint(lat=0.0, lon=lon) for lon in lons]
