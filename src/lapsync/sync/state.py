"""Video ↔ telemetry clock alignment."""

from __future__ import annotations

from dataclasses import dataclass

from lapsync.telemetry.models import Lap


@dataclass(frozen=True)
class SyncState:
    """The offset between the video clock and the telemetry clock.

    ``offset = video_time - telemetry_time``. ``None`` means no sync has been
    established yet; ``0.0`` is a real, synced offset.
    """

    offset: float | None = None

    @property
    def is_synced(self) -> bool:
        return self.offset is not None

    @classmethod
    def establish(cls, video_time: float, telemetry_time: float) -> SyncState:
        """Sync so that *video_time* shows the moment logged at *telemetry_time*."""
        return cls(offset=video_time - telemetry_time)

    @classmethod
    def for_lap(cls, video_time: float, lap: Lap) -> SyncState:
        """Sync so that *video_time* is the start of *lap*."""
        return cls.establish(video_time, lap.start_time)

    def video_time_for_telemetry(self, t: float) -> float:
        """Video time showing telemetry time *t* (identity while unsynced)."""
        return t + (self.offset or 0.0)

    def telemetry_time_for_video(self, v: float) -> float:
        """Telemetry time shown at video time *v* (identity while unsynced)."""
        return v - (self.offset or 0.0)

    def jump_to_lap_start(self, lap: Lap, video_duration: float) -> float:
        """Video time of *lap*'s start, clamped into ``[0, video_duration]``."""
        return max(0.0, min(self.video_time_for_telemetry(lap.start_time), video_duration))


def establish_sync(video_time: float, telemetry_time: float) -> SyncState:
    """Shortcut for :meth:`SyncState.establish`."""
    return SyncState.establish(video_time, telemetry_time)
