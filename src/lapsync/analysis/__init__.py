"""Diff-to-best and per-lap statistics."""

from lapsync.analysis.delta import DeltaCalculator, compute_diffs, find_nearest_by_distance
from lapsync.analysis.summary import LapSummary, summarize_laps

__all__ = [
    "DeltaCalculator",
    "LapSummary",
    "compute_diffs",
    "find_nearest_by_distance",
    "summarize_laps",
]
