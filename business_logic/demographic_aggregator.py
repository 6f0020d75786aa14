"""
Demographic aggregation: gender totals and age-group breakdowns.

Slice-level spend and revenue are never read from the payload. They are
always the campaign's dollars apportioned by the slice's share of audience.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from models.data_models import (
    AgeGroupPerformance,
    AgeGroupSpend,
    Campaign,
    DemographicMetrics,
    Gender,
)
from .metrics import conversion_rate, ctr, sort_by_age_group

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class _GenderTotals:
    clicks: float = 0
    spend: float = 0
    revenue: float = 0


@dataclass
class _AgeGroupCounters:
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0
    campaigns: int = 0


@dataclass
class _AgeGroupDollars:
    spend: float = 0
    revenue: float = 0


def _age_group_rows(groups: Dict[str, _AgeGroupCounters]) -> Tuple[AgeGroupPerformance, ...]:
    return tuple(
        AgeGroupPerformance(
            age_group=age_group,
            impressions=counters.impressions,
            clicks=counters.clicks,
            conversions=counters.conversions,
            campaigns=counters.campaigns,
            ctr=ctr(counters.clicks, counters.impressions),
            conversion_rate=conversion_rate(counters.conversions, counters.clicks),
        )
        for age_group, counters in groups.items()
    )


def aggregate_demographics(campaigns: Iterable[Campaign]) -> DemographicMetrics:
    """
    Aggregate demographic breakdowns across campaigns.

    Args:
        campaigns: Campaigns to reduce

    Returns:
        DemographicMetrics with male/female totals, per-gender age-group rows
        (encounter order) and gender-agnostic age-group dollars (rank order)
    """
    totals: Dict[Gender, _GenderTotals] = {gender: _GenderTotals() for gender in Gender}
    age_groups_by_gender: Dict[Gender, Dict[str, _AgeGroupCounters]] = {gender: {} for gender in Gender}
    age_group_dollars: Dict[str, _AgeGroupDollars] = {}
    skipped = 0

    for campaign in campaigns:
        for demo in campaign.demographic_breakdown:
            audience_share = demo.percentage_of_audience / 100
            demo_spend = campaign.spend * audience_share
            demo_revenue = campaign.revenue * audience_share

            gender = Gender.from_label(demo.gender)
            if gender is not None:
                bucket = totals[gender]
                bucket.clicks += demo.clicks
                bucket.spend += demo_spend
                bucket.revenue += demo_revenue

                counters = age_groups_by_gender[gender].setdefault(demo.age_group, _AgeGroupCounters())
                counters.impressions += demo.impressions
                counters.clicks += demo.clicks
                counters.conversions += demo.conversions
                counters.campaigns += 1
            else:
                skipped += 1

            dollars = age_group_dollars.setdefault(demo.age_group, _AgeGroupDollars())
            dollars.spend += demo_spend
            dollars.revenue += demo_revenue

    if skipped:
        logger.info(f"Excluded {skipped} demographic slices with unrecognised gender from gender totals")

    age_group_totals = tuple(
        sort_by_age_group(
            (AgeGroupSpend(age_group=age, spend=d.spend, revenue=d.revenue) for age, d in age_group_dollars.items()),
            key=lambda row: row.age_group,
        )
    )

    male = totals[Gender.MALE]
    female = totals[Gender.FEMALE]
    return DemographicMetrics(
        male_clicks=male.clicks,
        male_spend=male.spend,
        male_revenue=male.revenue,
        female_clicks=female.clicks,
        female_spend=female.spend,
        female_revenue=female.revenue,
        age_group_totals=age_group_totals,
        male_age_groups=_age_group_rows(age_groups_by_gender[Gender.MALE]),
        female_age_groups=_age_group_rows(age_groups_by_gender[Gender.FEMALE]),
    )
