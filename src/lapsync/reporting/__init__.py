"""Lap-table reporting."""

from lapsync.reporting.aggregator import SessionReportAggregator
from lapsync.reporting.formatter import MarkdownFormatter, format_time
from lapsync.reporting.models import LapRow, SessionReport

__all__ = [
    "LapRow",
    "MarkdownFormatter",
    "SessionReport",
    "SessionReportAggregator",
    "format_time",
]
