from pathlib import Path

import pytest

from gpx_split.config import load_config
from gpx_split.errors import ConfigError

ENV_VARS = [
    "GPXSPLIT_KIND", "GPXSPLIT_MODE", "GPXSPLIT_MAX",
    "GPXSPLIT_MODEL", "GPXSPLIT_PRETTY", "GPXSPLIT_WORKERS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def _load(tmp_path: Path):
    return load_config(
        repo_root=tmp_path,
        repo_config_path=tmp_path / "repo.toml",
        user_config_path=tmp_path / "user.toml",
    )


def test_defaults(tmp_path: Path):
    cfg = _load(tmp_path)
    assert (cfg.kind, cfg.mode, cfg.max, cfg.model) == ("track", "points", 500, "wgs84")
    assert cfg.pretty is True
    assert cfg.workers is None
    assert set(cfg.source.values()) == {"default"}


def test_user_overrides_repo(tmp_path: Path):
    (tmp_path / "repo.toml").write_text(
        '[split]\nkind = "route"\nmode = "length"\nmax = 2500\n[output]\nworkers = 2\n',
        encoding="utf-8",
    )
    (tmp_path / "user.toml").write_text(
        '[split]\nmax = 1000\n[geodesy]\nmodel = "haversine"\n',
        encoding="utf-8",
    )
    cfg = _load(tmp_path)
    assert cfg.kind == "route"
    assert cfg.mode == "length"
    assert cfg.max == 1000.0
    assert cfg.model == "haversine"
    assert cfg.workers == 2
    assert cfg.source["split.kind"].startswith("repo:")
    assert cfg.source["split.max"].startswith("user:")


def test_env_overrides_files(tmp_path: Path, monkeypatch):
    (tmp_path / "user.toml").write_text('[split]\nmode = "length"\n', encoding="utf-8")
    monkeypatch.setenv("GPXSPLIT_MODE", "Location")
    monkeypatch.setenv("GPXSPLIT_PRETTY", "no")
    cfg = _load(tmp_path)
    assert cfg.mode == "location"
    assert cfg.pretty is False
    assert cfg.source["split.mode"] == "env:GPXSPLIT_MODE"


@pytest.mark.parametrize(
    "toml",
    [
        '[split]\nmode = "minutes"\n',
        '[split]\nmax = "lots"\n',
        '[output]\nworkers = 0\n',
        '[output]\npretty = "sometimes"\n',
        '[split\nmode = "points"\n',
    ],
)
def test_invalid_config(tmp_path: Path, toml: str):
    (tmp_path / "user.toml").write_text(toml, encoding="utf-8")
    with pytest.raises(ConfigError):
        _load(tmp_path)
