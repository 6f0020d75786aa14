"""
Value formatters shared by cards, charts and tables.
"""

from typing import Union

from models.data_models import RegionMetric

Number = Union[int, float]

_REGION_METRIC_LABELS = {
    RegionMetric.REVENUE: "Revenue",
    RegionMetric.SPEND: "Spend",
    RegionMetric.IMPRESSIONS: "Impressions",
    RegionMetric.CLICKS: "Clicks",
    RegionMetric.CONVERSIONS: "Conversions",
}

_CURRENCY_METRICS = {RegionMetric.REVENUE, RegionMetric.SPEND}


def format_currency(value: Number) -> str:
    """Whole-dollar amount with thousands separators, e.g. ``$1,235``."""
    if value < 0:
        return f"-${abs(value):,.0f}"
    return f"${value:,.0f}"


def format_number(value: Number) -> str:
    """Count with thousands separators; fractional values keep two decimals."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def format_percent(value: Number) -> str:
    return f"{value:.2f}%"


def format_share(value: Number) -> str:
    return f"{value:.1f}%"


def format_roas(value: Number) -> str:
    return f"{value:.2f}x"


def region_metric_label(metric: Union[RegionMetric, str]) -> str:
    try:
        return _REGION_METRIC_LABELS[RegionMetric.parse(metric)]
    except ValueError:
        return str(metric)


def format_region_metric(metric: Union[RegionMetric, str], value: Number) -> str:
    """Dollar metrics as currency, everything else as a plain count."""
    if RegionMetric.parse(metric) in _CURRENCY_METRICS:
        return format_currency(value)
    return format_number(value)
