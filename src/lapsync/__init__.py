"""Lap telemetry ↔ onboard video analysis.

Parse a GPS data-logger export, split laps into automatically detected
sectors, compute a position-matched diff to the best lap, and map video time
to telemetry during playback.
"""

from lapsync.analysis.delta import compute_diffs
from lapsync.errors import DataQualityWarning, FormatError
from lapsync.sync.query import QueryResult, TelemetryQuery
from lapsync.sync.state import SyncState, establish_sync
from lapsync.telemetry.parser import parse
from lapsync.track.sectors import compute_sectors
from lapsync.track.timing import compute_sector_times

__version__ = "0.1.0"

__all__ = [
    "DataQualityWarning",
    "FormatError",
    "QueryResult",
    "SyncState",
    "TelemetryQuery",
    "__version__",
    "compute_diffs",
    "compute_sector_times",
    "compute_sectors",
    "establish_sync",
    "parse",
]
