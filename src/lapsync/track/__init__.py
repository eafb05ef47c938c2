"""Sector segmentation, gate geometry and sector timing."""

from lapsync.track.geometry import build_gate, find_border_crossing, haversine_m, locate_crossing
from lapsync.track.models import BestSectors, SectorGate, SectorTimes
from lapsync.track.sectors import SectorDetector, compute_sectors
from lapsync.track.timing import SectorTimer, compute_sector_times

__all__ = [
    "BestSectors",
    "SectorDetector",
    "SectorGate",
    "SectorTimer",
    "SectorTimes",
    "build_gate",
    "compute_sector_times",
    "compute_sectors",
    "find_border_crossing",
    "haversine_m",
    "locate_crossing",
]
