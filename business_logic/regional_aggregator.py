"""
Regional aggregation keyed by region label.

Region labels are treated as globally unique. When the same label arrives
with different countries the rows are still merged (first-seen country
wins), but the clash is logged and reported in ``country_conflicts``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Set, Union

from models.data_models import Campaign, RegionalMetrics, RegionMetric, RegionPerformance
from .metrics import conversion_rate, cpc, ctr, roas

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_TOP_REGIONS = 7


@dataclass
class _RegionCounters:
    country: str
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0
    spend: float = 0
    revenue: float = 0


def aggregate_regions(
    campaigns: Iterable[Campaign],
    selected_metric: Union[RegionMetric, str] = RegionMetric.REVENUE,
    top_n: int = DEFAULT_TOP_REGIONS,
) -> RegionalMetrics:
    """
    Aggregate regional performance across campaigns.

    Args:
        campaigns: Campaigns to reduce
        selected_metric: Metric copied into each region's ``value`` field
        top_n: Size of the top-regions-by-revenue subset

    Returns:
        RegionalMetrics with regions in first-encounter order

    Raises:
        ValueError: If selected_metric is not a known metric key
    """
    metric = RegionMetric.parse(selected_metric)
    region_data: Dict[str, _RegionCounters] = {}
    countries_seen: Dict[str, Set[str]] = {}

    for campaign in campaigns:
        for slice_ in campaign.regional_performance:
            counters = region_data.get(slice_.region)
            if counters is None:
                counters = _RegionCounters(country=slice_.country)
                region_data[slice_.region] = counters

            countries_seen.setdefault(slice_.region, set()).add(slice_.country)

            counters.impressions += slice_.impressions
            counters.clicks += slice_.clicks
            counters.conversions += slice_.conversions
            counters.spend += slice_.spend
            counters.revenue += slice_.revenue

    country_conflicts = {
        region: tuple(sorted(countries))
        for region, countries in countries_seen.items()
        if len(countries) > 1
    }
    for region, countries in country_conflicts.items():
        logger.warning(
            f"Region '{region}' reported under multiple countries {list(countries)}; "
            f"merged under '{region_data[region].country}'"
        )

    regions: List[RegionPerformance] = []
    for region, c in region_data.items():
        raw: Dict[str, Any] = {
            "impressions": c.impressions,
            "clicks": c.clicks,
            "conversions": c.conversions,
            "spend": c.spend,
            "revenue": c.revenue,
        }
        regions.append(
            RegionPerformance(
                region=region,
                country=c.country,
                value=raw[metric.value],
                ctr=ctr(c.clicks, c.impressions),
                conversion_rate=conversion_rate(c.conversions, c.clicks),
                roas=roas(c.revenue, c.spend),
                cpc=cpc(c.spend, c.clicks),
                **raw,
            )
        )

    # sorted() is stable, so equal revenue keeps encounter order
    top_regions = sorted(regions, key=lambda r: r.revenue, reverse=True)[:max(top_n, 0)]

    return RegionalMetrics(
        regions=tuple(regions),
        top_regions_by_revenue=tuple(top_regions),
        total_spend=sum(r.spend for r in regions),
        total_revenue=sum(r.revenue for r in regions),
        total_impressions=sum(r.impressions for r in regions),
        total_conversions=sum(r.conversions for r in regions),
        total_clicks=sum(r.clicks for r in regions),
        region_count=len(regions),
        selected_metric=metric,
        country_conflicts=country_conflicts,
    )
