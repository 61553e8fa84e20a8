# gpx_split/util/paths.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from gpx_split.errors import OutputPathError


def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def derive_output_path(base_path: Path, index: int) -> Path:
    """
    Insert `_<index>` before the file extension of `base_path`.

      out/track.gpx, 3  ->  out/track_3.gpx

    Raises:
      OutputPathError if `base_path` has no extension.
    """
    base_path = Path(base_path)
    if not base_path.suffix:
        raise OutputPathError(f"Output path has no file extension: {base_path}")
    return base_path.with_name(f"{base_path.stem}_{index}{base_path.suffix}")


def append_index_to_name(name: Optional[str], index: int) -> Optional[str]:
    """Suffix a trace name with its fragment index ("name #2"); None stays None."""
    if name is None:
        return None
    return f"{name} #{index}"
