"""TelemetryCSVParser — converts a GPS data-logger CSV export into a Session.

The export has a block of quoted metadata rows (``"Segment Times"``,
``"Beacon Markers"``, ``"Duration"``, ``"Date"``, ``"Time"``…), then a column
header row, one units row, and the data rows.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from lapsync.errors import FormatError
from lapsync.telemetry.laps import beacon_markers_to_lap_times, build_laps
from lapsync.telemetry.models import Session, SessionHeader, TelemetrySample

_logger = logging.getLogger(__name__)

_TIME_COLUMN = "Time"
_SPEED_COLUMN = "GPS Speed"

# CSV header label → TelemetrySample field, for the optional channels.
_OPTIONAL_COLUMNS: tuple[tuple[str, str], ...] = (
    ("GPS LatAcc",    "lat_acc"),
    ("GPS LonAcc",    "lon_acc"),
    ("Altitude",      "altitude"),
    ("GPS Latitude",  "lat"),
    ("GPS Longitude", "lon"),
    ("GPS Heading",   "heading"),
)

_SEGMENT_TIMES_LABELS = frozenset({"Segment Times"})
_BEACON_LABELS = frozenset({"Beacon Markers", "Beacons"})


@dataclass(frozen=True)
class _Metadata:
    """What the block above the column header contributes to a Session."""

    segment_times: list[float] | None
    beacons: list[float] | None
    header: SessionHeader


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas that are not inside double quotes.

    Quote characters are dropped and each field is stripped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def parse_time_string(text: str) -> float:
    """Parse ``'M:SS.mmm'`` or plain seconds into seconds.

    Raises:
        ValueError: If *text* is neither form.
    """
    parts = text.strip().split(":")
    if len(parts) == 2:
        return int(parts[0]) * 60 + float(parts[1])
    return float(text)


def _to_float(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _is_column_header(fields: list[str]) -> bool:
    return _TIME_COLUMN in fields and _SPEED_COLUMN in fields


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TelemetryCSVParser:
    """Parses the data-logger CSV text into an immutable :class:`Session`.

    Malformed data rows (non-numeric time or speed) are dropped silently;
    missing optional columns default to ``0.0`` on every sample.
    """

    def parse(self, text: str) -> Session:
        """Parse *text* and derive the lap windows.

        Raises:
            FormatError: If no column header row is found, or if the Time /
                GPS Speed columns cannot be located in it.
        """
        lines = [line.strip() for line in text.splitlines()]

        header_index = self._find_header_index(lines)
        if header_index is None:
            raise FormatError("Could not find data header in CSV file")

        meta = self._parse_metadata(lines[:header_index])
        columns = split_csv_line(lines[header_index])
        try:
            time_col = columns.index(_TIME_COLUMN)
            speed_col = columns.index(_SPEED_COLUMN)
        except ValueError as exc:
            raise FormatError("Could not find Time or GPS Speed columns") from exc

        optional = {
            field_name: columns.index(label)
            for label, field_name in _OPTIONAL_COLUMNS
            if label in columns
        }
        channels = frozenset(label for label, _ in _OPTIONAL_COLUMNS if label in columns)

        # Skip the header row and exactly one units row.
        samples = self._parse_rows(lines[header_index + 2:], time_col, speed_col, optional)

        lap_times = meta.segment_times
        if lap_times is None and meta.beacons is not None:
            last_time = samples[-1].time if samples else None
            lap_times = beacon_markers_to_lap_times(meta.beacons, last_time)
        if lap_times is None:
            lap_times = [samples[-1].time] if samples else []

        _logger.info(
            "Parsed %d telemetry samples, %d laps (%d optional channels)",
            len(samples), len(lap_times), len(channels),
        )
        return Session(
            samples=tuple(samples),
            lap_times=tuple(lap_times),
            laps=build_laps(lap_times),
            header=meta.header,
            channels=channels,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _find_header_index(self, lines: list[str]) -> int | None:
        for i, line in enumerate(lines):
            if line and _is_column_header(split_csv_line(line)):
                return i
        return None

    def _parse_metadata(self, lines: list[str]) -> _Metadata:
        """Collect lap boundaries and header rows from the metadata block."""
        segment_times: list[float] | None = None
        beacons: list[float] | None = None
        duration: float | None = None
        date: str | None = None
        start_time: str | None = None

        for line in lines:
            if not line:
                continue
            fields = split_csv_line(line)
            label, values = fields[0], [v for v in fields[1:] if v]
            if label in _SEGMENT_TIMES_LABELS:
                segment_times = self._parse_times(values, parse_time_string)
            elif label in _BEACON_LABELS:
                beacons = self._parse_times(values, float)
            elif label == "Duration" and values:
                duration = _to_float(values[0])
            elif label == "Date" and values:
                date = ",".join(fields[1:]).strip(", ")
            elif label == "Time" and values:
                start_time = values[0]

        return _Metadata(
            segment_times=segment_times,
            beacons=beacons,
            header=SessionHeader(duration=duration, date=date, time=start_time),
        )

    @staticmethod
    def _parse_times(values: list[str], convert) -> list[float]:
        times: list[float] = []
        for v in values:
            try:
                times.append(convert(v))
            except ValueError:
                _logger.debug("Ignoring unparseable lap marker %r", v)
        return times

    def _parse_rows(
        self,
        lines: list[str],
        time_col: int,
        speed_col: int,
        optional: dict[str, int],
    ) -> list[TelemetrySample]:
        samples: list[TelemetrySample] = []
        dropped = 0
        for line in lines:
            if not line:
                continue
            values = split_csv_line(line)
            if len(values) <= max(time_col, speed_col):
                dropped += 1
                continue
            t = _to_float(values[time_col])
            speed = _to_float(values[speed_col])
            if t is None or speed is None:
                dropped += 1
                continue

            kwargs: dict[str, float] = {}
            for field_name, col in optional.items():
                value = _to_float(values[col]) if col < len(values) else None
                kwargs[field_name] = value if value is not None else 0.0
            samples.append(TelemetrySample(time=t, speed=speed, **kwargs))

        if dropped:
            _logger.debug("Dropped %d malformed data rows", dropped)
        return samples


def parse(text: str) -> Session:
    """Shortcut for ``TelemetryCSVParser().parse(text)``."""
    return TelemetryCSVParser().parse(text)
