"""Core data processing for Tinder usage analytics.

Reduces the ``Usage`` series of a Tinder data export to summary statistics
and chart-ready series.  Used by the CLI (tinder_summary.py), the chart
renderer (tinder_viz.py) and the web dashboard (app.py).

Every function here is pure: inputs are never mutated and nothing is read
from or written to disk.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Sequence

from usage_export import UsageHistory, parse_date_key

logger = logging.getLogger(__name__)

# Index 0 is Sunday, matching the weekday numbering of the export's viewer.
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

RATE_UNAVAILABLE = "N/A"


@dataclass(frozen=True)
class TimePoint:
    """One entry of a usage series."""

    key: str
    value: int


@dataclass(frozen=True)
class AggregatedPoint:
    """The total of every TimePoint sharing one group key."""

    group: str
    total: int


@dataclass(frozen=True)
class SummaryStats:
    """Headline numbers shown on the dashboard cards."""

    total_matches: int
    total_right_swipes: int
    total_left_swipes: int
    total_messages_sent: int
    total_messages_received: int
    total_app_opens: int
    match_rate: str
    response_rate: str
    first_date: str | None
    last_date: str | None


# ---------------------------------------------------------------------------
# Series primitives
# ---------------------------------------------------------------------------

def flatten(series: Mapping[str, int]) -> list[TimePoint]:
    """Convert a date -> count mapping into a list of TimePoints.

    Order follows the mapping's iteration order, which for a decoded export
    is the order the dates appear in the file (not necessarily
    chronological).  Keys are not validated here.
    """
    return [TimePoint(key, value) for key, value in series.items()]


def _group_by(points: Iterable[TimePoint], key_fn) -> list[AggregatedPoint]:
    """Sum point values per ``key_fn(point)``, in first-occurrence order."""
    totals: dict[str, int] = {}
    for point in points:
        group = key_fn(point)
        totals[group] = totals.get(group, 0) + point.value
    return [AggregatedPoint(group, total) for group, total in totals.items()]


def group_by_month(points: Iterable[TimePoint]) -> list[AggregatedPoint]:
    """Group points by year-month (the first seven characters of the key).

    Args:
        points: TimePoints keyed by "YYYY-MM-DD" (or "YYYY-MM") strings.

    Returns:
        One AggregatedPoint per distinct "YYYY-MM" group, in the order each
        group first appears in *points*.
    """
    return _group_by(points, lambda p: p.key[:7])


def weekday_name(key: str, weekday_names: Sequence[str] = WEEKDAY_NAMES) -> str:
    """Return the weekday name for a date key.

    Raises:
        DateParseError: If *key* is not a calendar date.
    """
    # isoweekday(): Monday=1 .. Sunday=7, so % 7 gives Sunday=0 .. Saturday=6
    return weekday_names[parse_date_key(key).isoweekday() % 7]


def group_by_day_of_week(
    points: Iterable[TimePoint],
    weekday_names: Sequence[str] = WEEKDAY_NAMES,
) -> list[AggregatedPoint]:
    """Group points by the weekday their date key falls on.

    Args:
        points: TimePoints keyed by date strings.
        weekday_names: Seven labels, index 0 being Sunday.

    Returns:
        One AggregatedPoint per weekday seen, in first-occurrence order.

    Raises:
        ValueError: If *weekday_names* does not hold exactly seven names.
        DateParseError: If a key is not a calendar date.
    """
    if len(weekday_names) != 7:
        raise ValueError(f"Expected 7 weekday names, got {len(weekday_names)}")
    return _group_by(points, lambda p: weekday_name(p.key, weekday_names))


def sum_series(points: Iterable[TimePoint]) -> int:
    """Sum the values of a series.  An empty series sums to 0."""
    return sum(p.value for p in points)


def ratio_as_percent(numerator: float, denominator: float) -> str:
    """Format ``numerator / denominator`` as a whole percentage.

    Halves round up, so 0.125 renders as "13%".  A zero denominator has no
    meaningful rate and renders as ``RATE_UNAVAILABLE``.

    Examples:
        >>> ratio_as_percent(1, 2)
        '50%'
        >>> ratio_as_percent(3, 0)
        'N/A'
    """
    if not denominator:
        return RATE_UNAVAILABLE
    percent = Decimal(numerator) / Decimal(denominator) * 100
    return f"{percent.quantize(Decimal(1), rounding=ROUND_HALF_UP)}%"


def combine_series(
    a: Sequence[AggregatedPoint],
    b: Sequence[AggregatedPoint],
) -> list[AggregatedPoint]:
    """Add the totals of *b* to the matching groups of *a*.

    Output follows the order of *a*.  Every group of *a* must be present in
    *b*; groups only in *b* are dropped.

    Raises:
        KeyError: If *a* contains a group that *b* does not.
    """
    b_totals = {p.group: p.total for p in b}
    return [AggregatedPoint(p.group, p.total + b_totals[p.group]) for p in a]


# ---------------------------------------------------------------------------
# Chart ordering helpers
# ---------------------------------------------------------------------------

def order_by_weekday(
    points: Sequence[AggregatedPoint],
    weekday_names: Sequence[str] = WEEKDAY_NAMES,
) -> list[AggregatedPoint]:
    """Reorder a day-of-week grouping Sunday first, filling absent days with 0.

    The result always has seven points, so it lines up with a fixed set of
    chart labels and is safe to pass to ``combine_series``.
    """
    totals = {p.group: p.total for p in points}
    return [AggregatedPoint(name, totals.get(name, 0)) for name in weekday_names]


def order_by_month(points: Sequence[AggregatedPoint]) -> list[AggregatedPoint]:
    """Sort a month grouping chronologically for a time axis."""
    return sorted(points, key=lambda p: p.group)


def _chart_series(points: Sequence[AggregatedPoint]) -> dict[str, list]:
    """Split points into the parallel labels/values lists Chart.js expects."""
    return {
        "labels": [p.group for p in points],
        "values": [p.total for p in points],
    }


def format_count(value: int) -> str:
    """Format a count with thousands separators, e.g. 12345 -> "12,345"."""
    return f"{value:,}"


# ---------------------------------------------------------------------------
# Summary and dashboard payload
# ---------------------------------------------------------------------------

def _date_range(history: UsageHistory) -> tuple[str | None, str | None]:
    """Return the earliest and latest date key across every series."""
    dates = [
        parse_date_key(key)
        for series in (
            history.app_opens,
            history.swipes_likes,
            history.swipes_passes,
            history.matches,
            history.messages_sent,
            history.messages_received,
        )
        for key in series
    ]
    if not dates:
        return None, None
    return min(dates).isoformat(), max(dates).isoformat()


def compute_summary_stats(history: UsageHistory) -> SummaryStats:
    """Compute the headline totals and rates for one export.

    Match rate is matches per right swipe; response rate is messages
    received per message sent.  Either renders as ``RATE_UNAVAILABLE`` when
    its denominator is zero.
    """
    total_matches = sum_series(flatten(history.matches))
    total_right_swipes = sum_series(flatten(history.swipes_likes))
    total_messages_sent = sum_series(flatten(history.messages_sent))
    total_messages_received = sum_series(flatten(history.messages_received))
    first_date, last_date = _date_range(history)

    return SummaryStats(
        total_matches=total_matches,
        total_right_swipes=total_right_swipes,
        total_left_swipes=sum_series(flatten(history.swipes_passes)),
        total_messages_sent=total_messages_sent,
        total_messages_received=total_messages_received,
        total_app_opens=sum_series(flatten(history.app_opens)),
        match_rate=ratio_as_percent(total_matches, total_right_swipes),
        response_rate=ratio_as_percent(total_messages_received, total_messages_sent),
        first_date=first_date,
        last_date=last_date,
    )


def build_cards(stats: SummaryStats) -> list[dict[str, str | None]]:
    """Build the number cards in display order.

    Returns:
        List of dicts with keys title, value (display string) and
        description (tooltip text, or None).
    """
    return [
        {"title": "Total Matches", "value": format_count(stats.total_matches),
         "description": None},
        {"title": "Response Rate", "value": stats.response_rate,
         "description": "Number of messages that resulted in a response"},
        {"title": "Match Rate", "value": stats.match_rate,
         "description": "Number of right swipes that resulted in matches"},
        {"title": "Total Right Swipes", "value": format_count(stats.total_right_swipes),
         "description": None},
        {"title": "Total Left Swipes", "value": format_count(stats.total_left_swipes),
         "description": None},
    ]


def compute_chart_data(history: UsageHistory) -> dict[str, Any]:
    """Compute the four bar-chart series shown on the dashboard.

    Returns:
        Dict with keys matches_by_month, app_opens_by_month,
        activity_by_day_of_week (right plus left swipes) and
        matches_by_day_of_week.  Each value is a dict with parallel
        ``labels`` and ``values`` lists.  Month charts are chronological,
        day-of-week charts run Sunday to Saturday.
    """
    right_by_day = order_by_weekday(group_by_day_of_week(flatten(history.swipes_likes)))
    left_by_day = order_by_weekday(group_by_day_of_week(flatten(history.swipes_passes)))

    return {
        "matches_by_month": _chart_series(
            order_by_month(group_by_month(flatten(history.matches)))
        ),
        "app_opens_by_month": _chart_series(
            order_by_month(group_by_month(flatten(history.app_opens)))
        ),
        "activity_by_day_of_week": _chart_series(combine_series(right_by_day, left_by_day)),
        "matches_by_day_of_week": _chart_series(
            order_by_weekday(group_by_day_of_week(flatten(history.matches)))
        ),
    }


def build_dashboard_payload(history: UsageHistory) -> dict[str, Any]:
    """One-call entry point: compute everything the dashboard renders.

    Args:
        history: A validated UsageHistory (from ``usage_export``).

    Returns:
        Dict with keys generated_at (ISO timestamp), summary (the
        SummaryStats fields), cards (from ``build_cards``) and charts (from
        ``compute_chart_data``).
    """
    stats = compute_summary_stats(history)
    if stats.first_date is None:
        logger.warning("Usage history has no entries; the dashboard will be empty")

    return {
        "generated_at": datetime.now().isoformat(),
        "summary": asdict(stats),
        "cards": build_cards(stats),
        "charts": compute_chart_data(history),
    }


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def print_summary_report(stats: SummaryStats, charts: dict[str, Any]) -> None:
    """Print a human-readable summary report to stdout.

    Args:
        stats: Summary statistics (from ``compute_summary_stats``).
        charts: Chart series (from ``compute_chart_data``).
    """
    print(f"\n{'=' * 60}")
    print("Tinder Usage Summary")
    print(f"{'=' * 60}")
    if stats.first_date and stats.last_date:
        print(f"Data Range: {stats.first_date} to {stats.last_date}")
    print(f"Total Matches: {stats.total_matches:,}")
    print(f"Total Right Swipes: {stats.total_right_swipes:,}")
    print(f"Total Left Swipes: {stats.total_left_swipes:,}")
    print(f"Total App Opens: {stats.total_app_opens:,}")
    print(f"Messages Sent: {stats.total_messages_sent:,}")
    print(f"Messages Received: {stats.total_messages_received:,}")
    print(f"Match Rate: {stats.match_rate}")
    print(f"Response Rate: {stats.response_rate}")

    activity = charts["activity_by_day_of_week"]
    matches = charts["matches_by_day_of_week"]
    print(f"\n{'Day':<12} {'Swipes':>10} {'Matches':>10}")
    print(f"{'-' * 34}")
    for day, swipes, day_matches in zip(activity["labels"], activity["values"], matches["values"]):
        print(f"{day:<12} {swipes:>10,} {day_matches:>10,}")

    monthly = charts["matches_by_month"]
    if monthly["labels"]:
        print("\nMatches by Month:")
        for month, total in zip(monthly["labels"], monthly["values"]):
            print(f"  {month}: {total:,}")

    print(f"{'=' * 60}")
