"""Display-ready formatting of playback queries."""

from lapsync.overlay.renderer import OverlayData, OverlayRenderer

__all__ = ["OverlayData", "OverlayRenderer"]
