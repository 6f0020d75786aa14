"""
Weekly aggregation and peak-week detection.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Sequence, Tuple

from models.data_models import Campaign, SeriesPoint, WeeklyMetrics, WeekPerformance
from .metrics import roas

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class _WeekCounters:
    spend: float = 0
    revenue: float = 0
    impressions: float = 0
    clicks: float = 0


def parse_week_start(week_start: str) -> Optional[date]:
    """Parse the date part of an ISO week start; None when it is not a date."""
    try:
        return date.fromisoformat(week_start[:10])
    except ValueError:
        return None


def format_week_label(week_start: str) -> str:
    """Short month/day axis label, e.g. ``Jan 8``."""
    parsed = parse_week_start(week_start)
    if parsed is None:
        return week_start
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}"


def _week_sort_key(item: Tuple[int, str]) -> Tuple[int, date, int]:
    position, week_start = item
    parsed = parse_week_start(week_start)
    if parsed is None:
        return (1, date.min, position)
    return (0, parsed, position)


def aggregate_weekly(campaigns: Iterable[Campaign]) -> WeeklyMetrics:
    """
    Aggregate weekly performance across campaigns.

    Weeks are ordered by calendar date, not by string comparison. Keys that
    are not dates follow all dated weeks in encounter order.
    """
    weekly_data: Dict[str, _WeekCounters] = {}

    for campaign in campaigns:
        for week in campaign.weekly_performance:
            counters = weekly_data.setdefault(week.week_start, _WeekCounters())
            counters.spend += week.spend
            counters.revenue += week.revenue
            counters.impressions += week.impressions
            counters.clicks += week.clicks

    ordered_keys = [key for _, key in sorted(enumerate(weekly_data), key=_week_sort_key)]
    undated = [key for key in ordered_keys if parse_week_start(key) is None]
    if undated:
        logger.warning(f"Weekly rows with unparseable week_start placed last: {undated}")

    weeks = tuple(
        WeekPerformance(
            week_start=key,
            label=format_week_label(key),
            spend=weekly_data[key].spend,
            revenue=weekly_data[key].revenue,
            impressions=weekly_data[key].impressions,
            clicks=weekly_data[key].clicks,
        )
        for key in ordered_keys
    )

    total_spend = sum(w.spend for w in weeks)
    total_revenue = sum(w.revenue for w in weeks)

    return WeeklyMetrics(
        weeks=weeks,
        revenue_by_week=tuple(SeriesPoint(label=w.label, value=w.revenue) for w in weeks),
        spend_by_week=tuple(SeriesPoint(label=w.label, value=w.spend) for w in weeks),
        total_spend=total_spend,
        total_revenue=total_revenue,
        total_impressions=sum(w.impressions for w in weeks),
        total_clicks=sum(w.clicks for w in weeks),
        average_roas=roas(total_revenue, total_spend),
        week_count=len(weeks),
    )


def find_peak(series: Sequence[SeriesPoint]) -> Optional[SeriesPoint]:
    """
    Return the point with the highest value, or None for an empty series.

    A later point only replaces the current peak when strictly greater, so
    ties resolve to the first occurrence.
    """
    peak: Optional[SeriesPoint] = None
    for point in series:
        if peak is None or point.value > peak.value:
            peak = point
    return peak
