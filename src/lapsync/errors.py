"""Exception and warning types shared across the package."""

from __future__ import annotations


class FormatError(ValueError):
    """Raised when telemetry text has no usable column header row."""


class DataQualityWarning(UserWarning):
    """Issued when the data cannot support an analysis step.

    The step returns an empty result instead of raising; callers decide how
    to surface the warning.
    """
