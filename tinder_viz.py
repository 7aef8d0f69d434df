"""tinder_viz.py

Render the dashboard's bar charts for a Tinder data export as PNG files.

Usage:
    python tinder_viz.py data.json --output-dir tinder_analytics
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from analytics import compute_chart_data  # noqa: E402
from usage_export import UsageExportError, load_usage_history  # noqa: E402

logger = logging.getLogger(__name__)

BAR_RED = "#f56565"

# (chart key, file name, title, y-axis label)
CHART_FILES = [
    ("matches_by_month", "matches_by_month.png", "Matches by Month", "Matches"),
    ("app_opens_by_month", "app_opens_by_month.png", "App Opens by Month", "App Opens"),
    ("activity_by_day_of_week", "activity_by_day_of_week.png", "Activity by Day of Week", "Swipes"),
    ("matches_by_day_of_week", "matches_by_day_of_week.png", "Matches by Day of Week", "Matches"),
]


def chart_frame(series: dict[str, list]) -> pd.DataFrame:
    """Turn a ``{labels, values}`` chart series into a two-column DataFrame."""
    return pd.DataFrame({"label": series["labels"], "value": series["values"]})


def _render_bar_chart(df: pd.DataFrame, title: str, ylabel: str, path: str) -> None:
    """Draw one bar chart and save it to *path*."""
    fig, ax = plt.subplots(figsize=(12, 6))
    if df.empty:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
    else:
        sns.barplot(data=df, x="label", y="value", color=BAR_RED, ax=ax)
    ax.set_title(title, fontsize=14, pad=20)
    ax.set_xlabel("")
    ax.set_ylabel(ylabel, fontsize=12)
    ax.grid(True, axis="y", alpha=0.3)
    ax.tick_params(axis="x", rotation=45)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def render_charts(charts: dict[str, Any], output_dir: str = "tinder_analytics") -> list[str]:
    """Render every dashboard chart to a PNG file.

    Args:
        charts: Chart series dict (from ``analytics.compute_chart_data``).
        output_dir: Directory for the PNG files.  Created if missing.

    Returns:
        The paths of the files written.
    """
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for key, filename, title, ylabel in CHART_FILES:
        path = os.path.join(output_dir, filename)
        _render_bar_chart(chart_frame(charts[key]), title, ylabel, path)
        logger.debug("Wrote %s", path)
        written.append(path)
    return written


def main(json_file: str = "data.json", output_dir: str = "tinder_analytics") -> None:
    """Load an export and render its charts.  Exits 1 on a bad input file."""
    try:
        history = load_usage_history(json_file)
    except FileNotFoundError:
        print(f"Error: file not found: {json_file}", file=sys.stderr)
        sys.exit(1)
    except UsageExportError as exc:
        print(f"Error ({exc.kind}): {exc}", file=sys.stderr)
        sys.exit(1)

    paths = render_charts(compute_chart_data(history), output_dir)
    print(f"Visualizations have been saved in the '{output_dir}' directory:")
    for path in paths:
        print(f"  {path}")


def cli() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Render Tinder usage charts as PNG files")
    parser.add_argument("json_file", nargs="?", default="data.json",
                        help="Path to the export JSON file (default: data.json)")
    parser.add_argument("--output-dir", "-o", default="tinder_analytics",
                        help="Directory for the PNG files (default: tinder_analytics)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    main(args.json_file, args.output_dir)


if __name__ == "__main__":
    cli()
