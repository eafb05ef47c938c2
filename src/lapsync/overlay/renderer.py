"""Overlay rendering — data formatting for the telemetry readout over the video."""

from __future__ import annotations

from dataclasses import dataclass

from lapsync.sync.query import QueryResult

_NO_DATA = "--"


@dataclass
class OverlayData:
    """Snapshot of data to display next to the video.

    Parameters
    ----------
    speed:
        GPS speed in km/h.
    lat_acc:
        Lateral acceleration (g).
    lon_acc:
        Longitudinal acceleration (g).
    altitude:
        Altitude in metres.
    diff_s:
        Diff to the best lap at this track position (seconds), or ``None``.
        Positive = slower than the reference.
    reference_speed:
        Reference-lap speed at the same place on track, or ``None``.
    lap_name:
        ``'Out Lap'`` / ``'Lap N'``, or ``None`` outside every lap.
    """

    speed: float
    lat_acc: float
    lon_acc: float
    altitude: float
    diff_s: float | None = None
    reference_speed: float | None = None
    lap_name: str | None = None

    @classmethod
    def from_query(cls, result: QueryResult) -> OverlayData:
        s = result.sample
        return cls(
            speed=s.speed,
            lat_acc=s.lat_acc,
            lon_acc=s.lon_acc,
            altitude=s.altitude,
            diff_s=result.diff,
            reference_speed=result.reference_speed,
            lap_name=result.lap.name if result.lap is not None else None,
        )


class OverlayRenderer:
    """Formats :class:`OverlayData` for display.

    All values are pure data transformations with no side effects, safe to
    call from the playback loop.
    """

    def format_delta(self, delta_s: float | None) -> str:
        """Format a diff as a signed string with 3 decimal places.

        Examples
        --------
        >>> OverlayRenderer().format_delta(0.342)
        '+0.342'
        >>> OverlayRenderer().format_delta(-0.125)
        '-0.125'
        >>> OverlayRenderer().format_delta(None)
        '--'
        """
        if delta_s is None:
            return _NO_DATA
        sign = "+" if delta_s >= 0 else ""
        return f"{sign}{delta_s:.3f}"

    def delta_status(self, delta_s: float | None) -> str:
        """``'behind'``, ``'ahead'``, ``'even'`` or ``'no data'``."""
        if delta_s is None:
            return "no data"
        if delta_s > 0:
            return "behind"
        if delta_s < 0:
            return "ahead"
        return "even"

    def render(self, data: OverlayData) -> dict:
        """Return a display-ready dict from an :class:`OverlayData` snapshot.

        Returns
        -------
        dict with keys:
            ``speed``            – integer km/h
            ``lat_acc``          – string, 1 decimal place
            ``lon_acc``          – string, 1 decimal place
            ``altitude``         – integer metres
            ``delta``            – formatted diff (e.g. ``'+0.342'`` or ``'--'``)
            ``delta_status``     – see :meth:`delta_status`
            ``reference_speed``  – integer km/h or ``None``
            ``lap``              – lap name or ``None``
        """
        return {
            "speed": round(data.speed),
            "lat_acc": f"{data.lat_acc:.1f}",
            "lon_acc": f"{data.lon_acc:.1f}",
            "altitude": round(data.altitude),
            "delta": self.format_delta(data.diff_s),
            "delta_status": self.delta_status(data.diff_s),
            "reference_speed": (
                round(data.reference_speed) if data.reference_speed is not None else None
            ),
            "lap": data.lap_name,
        }
