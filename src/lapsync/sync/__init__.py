"""Video ↔ telemetry synchronisation and playback queries."""

from lapsync.sync.query import QueryResult, TelemetryQuery
from lapsync.sync.state import SyncState, establish_sync

__all__ = ["QueryResult", "SyncState", "TelemetryQuery", "establish_sync"]
