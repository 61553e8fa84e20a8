# gpx_split/errors

"""
gpx_split.errors

Central exception hierarchy for gpx-split.

Rationale:
  - Modules raise specific, meaningful errors.
  - Callers can catch GpxSplitError (broad) or specific subclasses (narrow).
  - "Nothing to split" is never an error; it is reported as a zero file count.
"""


class GpxSplitError(RuntimeError):
    """Base class for all gpx-split runtime errors."""


# ---- Input / output errors ---------------------

class InputError(GpxSplitError):
    """Input GPX (or POI) file is missing, unreadable or malformed."""

class OutputPathError(GpxSplitError):
    """Output path has no extension to splice a fragment index into."""

class WriteError(GpxSplitError):
    """A fragment could not be written to disk."""


# ---- Configuration errors ----------------------

class ConfigError(GpxSplitError):
    """Invalid configuration file, environment value or limit parameter."""
