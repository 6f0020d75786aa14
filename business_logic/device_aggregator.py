"""
Device aggregation over the fixed Mobile / Desktop / Tablet variant set.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from models.data_models import (
    Campaign,
    CampaignDeviceBreakdown,
    DeviceBreakdown,
    DeviceMetrics,
    DevicePerformance,
    DeviceType,
)
from .metrics import conversion_rate, ctr, roas, safe_divide, share

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class _DeviceCounters:
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0
    spend: float = 0
    revenue: float = 0
    campaigns: int = 0


def aggregate_devices(campaigns: Iterable[Campaign]) -> DeviceMetrics:
    """
    Aggregate device performance across campaigns.

    Slices for devices outside the known set contribute nothing. The
    per-campaign breakdown only keeps campaigns where at least one device
    earned revenue.
    """
    counters: Dict[DeviceType, _DeviceCounters] = {device: _DeviceCounters() for device in DeviceType}
    campaign_breakdown: List[CampaignDeviceBreakdown] = []
    ignored_devices = set()

    for campaign in campaigns:
        per_device: Dict[str, DeviceBreakdown] = {device.value: DeviceBreakdown() for device in DeviceType}

        for slice_ in campaign.device_performance:
            device = DeviceType.from_label(slice_.device)
            if device is None:
                ignored_devices.add(slice_.device)
                continue

            bucket = counters[device]
            bucket.impressions += slice_.impressions
            bucket.clicks += slice_.clicks
            bucket.conversions += slice_.conversions
            bucket.spend += slice_.spend
            bucket.revenue += slice_.revenue
            bucket.campaigns += 1

            per_device[device.value] = DeviceBreakdown(
                revenue=slice_.revenue,
                spend=slice_.spend,
                conversions=slice_.conversions,
                roas=roas(slice_.revenue, slice_.spend),
            )

        if any(entry.revenue > 0 for entry in per_device.values()):
            campaign_breakdown.append(
                CampaignDeviceBreakdown(
                    campaign_name=campaign.name,
                    campaign_id=campaign.id,
                    medium=campaign.medium,
                    devices=per_device,
                )
            )

    if ignored_devices:
        logger.warning(f"Ignored device slices with unknown device names: {sorted(ignored_devices)}")

    total_revenue = sum(c.revenue for c in counters.values())
    total_spend = sum(c.spend for c in counters.values())

    devices = tuple(
        DevicePerformance(
            device=device.value,
            impressions=c.impressions,
            clicks=c.clicks,
            conversions=c.conversions,
            spend=c.spend,
            revenue=c.revenue,
            campaigns=c.campaigns,
            ctr=ctr(c.clicks, c.impressions),
            conversion_rate=conversion_rate(c.conversions, c.clicks),
            roas=roas(c.revenue, c.spend),
            avg_revenue_per_campaign=safe_divide(c.revenue, c.campaigns),
            revenue_share=share(c.revenue, total_revenue),
        )
        for device, c in counters.items()
    )

    return DeviceMetrics(
        devices=devices,
        campaign_breakdown=tuple(campaign_breakdown),
        total_revenue=total_revenue,
        total_spend=total_spend,
        total_conversions=sum(c.conversions for c in counters.values()),
        total_clicks=sum(c.clicks for c in counters.values()),
        total_impressions=sum(c.impressions for c in counters.values()),
        mobile_share=share(counters[DeviceType.MOBILE].revenue, total_revenue),
        desktop_share=share(counters[DeviceType.DESKTOP].revenue, total_revenue),
        tablet_share=share(counters[DeviceType.TABLET].revenue, total_revenue),
    )
