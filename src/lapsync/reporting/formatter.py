"""Markdown lap-table formatter."""

from __future__ import annotations

import math
from pathlib import Path

from lapsync.reporting.models import LapRow, SessionReport


def format_time(seconds: float | None) -> str:
    """Format seconds as ``MM:SS.mmm``; ``'00:00.000'`` for missing/NaN input.

    >>> format_time(63.608)
    '01:03.608'
    """
    if seconds is None or not math.isfinite(seconds):
        return "00:00.000"
    total_ms = round(seconds * 1000)
    minutes, rem_ms = divmod(total_ms, 60_000)
    secs, ms = divmod(rem_ms, 1000)
    return f"{minutes:02d}:{secs:02d}.{ms:03d}"


def _format_row(row: LapRow, n_sectors: int) -> str:
    sectors: list[str] = []
    for k in range(n_sectors):
        if k < len(row.sector_times):
            cell = format_time(row.sector_times[k])
            if k < len(row.best_sector_flags) and row.best_sector_flags[k]:
                cell = f"**{cell}**"
        else:
            cell = ""
        sectors.append(cell)
    name = f"{row.name} ★" if row.is_best else row.name
    cells = [
        name,
        format_time(row.lap_time),
        format_time(row.start_time),
        *sectors,
        f"{row.avg_speed:.2f}",
        f"{row.max_speed:.2f}",
        str(row.sample_count),
    ]
    return "| " + " | ".join(cells) + " |"


class MarkdownFormatter:
    """Format a :class:`~lapsync.reporting.models.SessionReport` as Markdown."""

    def format(self, report: SessionReport) -> str:
        """Return the full Markdown report as a string."""
        lines: list[str] = ["# Session Laps", ""]

        if report.date:
            lines.append(f"**Date**: {report.date}  ")
        if report.time:
            lines.append(f"**Time**: {report.time}  ")
        if report.duration is not None:
            lines.append(f"**Duration**: {report.duration:.2f}s  ")
        lines.append(f"**Laps**: {len(report.laps)}")
        lines.append("")

        n_sectors = len(report.sector_labels)
        header = ["Lap", "Lap Time", "Start", *report.sector_labels,
                  "Avg km/h", "Max km/h", "Samples"]
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + "|".join("---" for _ in header) + "|")
        for row in report.laps:
            lines.append(_format_row(row, n_sectors))
        lines.append("")

        if report.best_sector_times:
            best = " / ".join(format_time(t) for t in report.best_sector_times)
            lines.append(f"**Best sectors**: {best}  ")
        if report.theoretical_best is not None:
            lines.append(f"**Theoretical best**: {format_time(report.theoretical_best)}")
            lines.append("")

        return "\n".join(lines)

    def write(self, report: SessionReport, path: str) -> None:
        """Write the formatted report to *path* (UTF-8)."""
        Path(path).write_text(self.format(report), encoding="utf-8")
