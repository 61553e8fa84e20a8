# gpx_split/split/context.py
"""
Run one split: read the input, split with the configured splitter, write.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from gpx_split.formats.gpx import read_gpx
from gpx_split.split.splitter import Splitter
from gpx_split.util.logging import debug


class Context:
    """
    Binds an input file and a Splitter.

    `output_path` is the template for output files (fragment i goes to
    "<stem>_<i><suffix>"); it defaults to the input path itself.
    """

    def __init__(self, input_path: Path, splitter: Splitter, output_path: Optional[Path] = None):
        self.input_path = Path(input_path)
        self.splitter = splitter
        self.output_path = Path(output_path) if output_path is not None else self.input_path

    def run(self) -> int:
        """
        Split the input and write the fragments.

        Returns the number of files written; 0 when splitting did not produce
        more traces than the input had (nothing is written then).

        Raises:
          InputError, OutputPathError, WriteError
        """
        gpx = read_gpx(self.input_path)
        traces = self.splitter.traces(gpx)
        fragments = self.splitter.split(traces)

        if len(fragments) <= len(traces):
            debug(f"{self.input_path}: nothing to split ({len(traces)} {self.splitter.kind.label}(s))")
            return 0

        written = self.splitter.write_all(gpx, fragments, self.output_path)
        debug(f"{self.input_path}: wrote {len(written)} file(s)")
        return len(written)
