# gpx_split/util/logging.py
from __future__ import annotations

import datetime

_verbose = False


def set_verbose(enabled: bool) -> None:
    """Turn debug() output on or off for the whole process."""
    global _verbose
    _verbose = enabled


def log(msg: str) -> None:
    """Print a timestamped log line (local time with timezone)."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}")


def debug(msg: str) -> None:
    """Like log(), but only when verbose output is enabled."""
    if _verbose:
        log(msg)
