"""Telemetry ingestion.

Public API
----------
TelemetrySample     - single row of GPS telemetry
Lap                 - one lap positioned on the telemetry clock
Session             - immutable parsed telemetry set
TelemetryCSVParser  - CSV text → Session
FormatError         - raised when the CSV has no usable header
"""

from lapsync.errors import FormatError
from lapsync.telemetry.laps import build_laps, find_best_lap
from lapsync.telemetry.models import Lap, Session, SessionHeader, TelemetrySample
from lapsync.telemetry.parser import TelemetryCSVParser, parse

__all__ = [
    "FormatError",
    "Lap",
    "Session",
    "SessionHeader",
    "TelemetryCSVParser",
    "TelemetrySample",
    "build_laps",
    "find_best_lap",
    "parse",
]
