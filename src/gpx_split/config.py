"""
gpx-split configuration loader

This module centralizes *all* configuration handling for gpx-split.

Design goals:
- Keep the command Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal preferences:
    ~/.config/gpx-split/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by gpx_split.cli)
2) Environment variables (GPXSPLIT_*)
3) User config: ~/.config/gpx-split/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from gpx_split.errors import ConfigError
from gpx_split.geo.geodesy import MODELS
from gpx_split.split.limit import MODES
from gpx_split.split.splitter import KINDS

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise a ConfigError
      with a clear, user-facing message.

    Rationale:
    - Missing config files are normal and expected.
    - Malformed config files indicate user intent and should fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        # Wrap parsing errors with file context for usability
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "split.mode")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_bool(v: Any, key: str) -> bool:
    """
    Coerce loosely-typed config values into booleans.

    Accepts common truthy / falsy representations so that TOML and
    environment variables behave consistently.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    raise ConfigError(f"{key}: expected a boolean, got {v!r}")


def _as_float(v: Any, key: str) -> float:
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: expected a number, got {v!r}") from e


def _as_int(v: Any, key: str) -> int:
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: expected an integer, got {v!r}") from e


def _as_choice(v: Any, key: str, choices: tuple[str, ...]) -> str:
    s = str(v).strip().lower()
    if s not in choices:
        raise ConfigError(f"{key}: expected one of {', '.join(choices)}, got {v!r}")
    return s


# ---------------------------------------------------------------------------
# Repo discovery
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


# ---------------------------------------------------------------------------
# Typed config dataclass
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GpxSplitConfig:
    """
    Fully merged gpx-split configuration.

    Attributes:
    - kind:    "route" or "track"
    - mode:    "points", "length" or "location"
    - max:     points, meters, or location distance in meters (by mode)
    - model:   distance model for the length limit ("wgs84" / "haversine")
    - pretty:  indent output XML
    - workers: writer thread count (None = executor default)
    - source:  provenance map showing where each value came from
    """

    kind: str = "track"
    mode: str = "points"
    max: float = 500
    model: str = "wgs84"
    pretty: bool = True
    workers: Optional[int] = None
    source: dict[str, str] = None


# Config key -> GpxSplitConfig field
_KEYS = {
    "split.kind": "kind",
    "split.mode": "mode",
    "split.max": "max",
    "geodesy.model": "model",
    "output.pretty": "pretty",
    "output.workers": "workers",
}

_ENV_MAP = {
    "GPXSPLIT_KIND": "split.kind",
    "GPXSPLIT_MODE": "split.mode",
    "GPXSPLIT_MAX": "split.max",
    "GPXSPLIT_MODEL": "geodesy.model",
    "GPXSPLIT_PRETTY": "output.pretty",
    "GPXSPLIT_WORKERS": "output.workers",
}


def _coerce(key: str, v: Any) -> Any:
    if key == "split.kind":
        return _as_choice(v, key, KINDS)
    if key == "split.mode":
        return _as_choice(v, key, MODES)
    if key == "split.max":
        return _as_float(v, key)
    if key == "geodesy.model":
        return _as_choice(v, key, MODELS)
    if key == "output.pretty":
        return _as_bool(v, key)
    if key == "output.workers":
        n = _as_int(v, key)
        if n < 1:
            raise ConfigError(f"{key}: must be at least 1, got {n}")
        return n
    raise KeyError(key)


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GpxSplitConfig:
    """
    Load, merge, and normalize all gpx-split configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpx-split" / "config.toml"

    # Load raw TOML dicts
    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    defaults = GpxSplitConfig()
    values: dict[str, Any] = {k: getattr(defaults, f) for k, f in _KEYS.items()}

    # Track provenance for debugging
    src = {k: "default" for k in _KEYS}

    # Repo config, then user config (user overrides repo)
    for cfg, label, path in ((repo_cfg, "repo", repo_config_path), (user_cfg, "user", user_config_path)):
        for k in _KEYS:
            v = _deep_get(cfg, k)
            if v is None:
                continue
            values[k] = _coerce(k, v)
            src[k] = f"{label}:{path}"

    # Environment variable overrides (highest non-CLI precedence)
    for env, k in _ENV_MAP.items():
        v = os.environ.get(env)
        if not v:
            continue
        values[k] = _coerce(k, v)
        src[k] = f"env:{env}"

    return GpxSplitConfig(**{f: values[k] for k, f in _KEYS.items()}, source=src)
