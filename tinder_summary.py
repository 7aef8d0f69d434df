"""tinder_summary.py

Print a summary of a Tinder data export and optionally save the aggregates.

Usage:
    python tinder_summary.py data.json
    python tinder_summary.py data.json --output-dir tinder_analytics
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any

from analytics import (
    SummaryStats,
    compute_chart_data,
    compute_summary_stats,
    print_summary_report,
)
from usage_export import UsageExportError, load_usage_history

logger = logging.getLogger(__name__)


def save_analytics_files(
    stats: SummaryStats,
    charts: dict[str, Any],
    output_dir: str = "tinder_analytics",
) -> list[str]:
    """Write the summary and chart series to JSON/CSV files.

    Creates *output_dir* if needed and writes summary.json, monthly.csv
    (matches and app opens per month) and day_of_week.csv (swipes and
    matches per weekday).

    Returns:
        The paths written, in that order.
    """
    os.makedirs(output_dir, exist_ok=True)
    summary_path = os.path.join(output_dir, "summary.json")
    monthly_path = os.path.join(output_dir, "monthly.csv")
    weekday_path = os.path.join(output_dir, "day_of_week.csv")

    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump({"summary": asdict(stats), "charts": charts}, f, indent=2)

    matches = dict(zip(charts["matches_by_month"]["labels"], charts["matches_by_month"]["values"]))
    opens = dict(zip(charts["app_opens_by_month"]["labels"], charts["app_opens_by_month"]["values"]))
    with open(monthly_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["month", "matches", "app_opens"])
        writer.writeheader()
        for month in sorted(set(matches) | set(opens)):
            writer.writerow(
                {"month": month, "matches": matches.get(month, 0), "app_opens": opens.get(month, 0)}
            )

    activity = charts["activity_by_day_of_week"]
    day_matches = charts["matches_by_day_of_week"]
    with open(weekday_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["day", "swipes", "matches"])
        writer.writeheader()
        for day, swipes, total in zip(activity["labels"], activity["values"], day_matches["values"]):
            writer.writerow({"day": day, "swipes": swipes, "matches": total})

    return [summary_path, monthly_path, weekday_path]


def main(json_file: str = "data.json", output_dir: str | None = None) -> None:
    """Load an export, print the report and optionally save the aggregates.

    Exits with status 1 if the file is missing or is not a usable export.
    """
    try:
        history = load_usage_history(json_file)
    except FileNotFoundError:
        print(f"Error: file not found: {json_file}", file=sys.stderr)
        sys.exit(1)
    except UsageExportError as exc:
        print(f"Error ({exc.kind}): {exc}", file=sys.stderr)
        sys.exit(1)

    stats = compute_summary_stats(history)
    charts = compute_chart_data(history)
    print_summary_report(stats, charts)

    if output_dir:
        paths = save_analytics_files(stats, charts, output_dir)
        print(f"\nAnalytics data has been saved to the '{output_dir}' directory:")
        for path in paths:
            print(f"  {path}")


def cli() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Summarise a Tinder data export")
    parser.add_argument("json_file", nargs="?", default="data.json",
                        help="Path to the export JSON file (default: data.json)")
    parser.add_argument("--output-dir", "-o",
                        help="Also write summary.json and CSV aggregates to this directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    main(args.json_file, args.output_dir)


if __name__ == "__main__":
    cli()
