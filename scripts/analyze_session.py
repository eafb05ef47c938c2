"""Session analysis script — lap table with automatic sectors from a logger CSV.

Usage:
  uv run python scripts/analyze_session.py \\
      --csv session.csv \\
      --output laps.md

Settings (log level, match distance, search window) come from ``LAPSYNC_*``
environment variables or a ``.env`` file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lapsync.config import Settings
from lapsync.errors import FormatError
from lapsync.reporting.aggregator import SessionReportAggregator
from lapsync.reporting.formatter import MarkdownFormatter, format_time
from lapsync.web.service import analyze_text


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate a lap/sector report from a telemetry CSV")
    ap.add_argument("--csv", required=True, help="Telemetry CSV export")
    ap.add_argument("--output", default="lap_report.md", help="Output Markdown file path")
    args = ap.parse_args()

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    print(f"CSV       : {args.csv}")
    print()

    # ------------------------------------------------------------------
    # 1. Parse + analyse
    # ------------------------------------------------------------------
    print("1/2  Parsing and analysing...")
    try:
        analysis = analyze_text(Path(args.csv).read_text(encoding="utf-8"), settings)
    except FormatError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)

    session = analysis.session
    best = session.best_lap
    print(f"     {len(session.samples)} samples / {len(session.laps)} laps / "
          f"{len(analysis.gates) + 1} sectors")
    if best is not None:
        print(f"     Best lap: {best.name} ({format_time(best.lap_time)})")
    for message in analysis.warnings:
        print(f"  [!] {message}", file=sys.stderr)

    # ------------------------------------------------------------------
    # 2. Write Markdown
    # ------------------------------------------------------------------
    print(f"2/2  Writing report → {args.output}")
    report = SessionReportAggregator().aggregate(
        session, analysis.sector_times, analysis.best_sectors
    )
    MarkdownFormatter().write(report, args.output)
    print(f"\n[OK] Done: {args.output}")


if __name__ == "__main__":
    main()
