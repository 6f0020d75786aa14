#!/usr/bin/env python3
"""
Demonstration of the data loading and aggregation pipeline.

This script loads a marketing dataset with the DataManager and prints the
demographic, device, regional and weekly aggregates the dashboard displays.
"""

import sys

from business_logic.dashboard_controller import DashboardController
from business_logic.weekly_aggregator import find_peak
from data.manager import DataManager
from ui.formatting import format_currency, format_number, format_percent, format_roas, format_share


def main(source: str = None):
    """Demonstrate the aggregation pipeline on a data file or URL."""

    print("=== Campaign Performance Dashboard Metrics Demo ===\n")

    print("1. Loading marketing data...")
    controller = DashboardController(DataManager(source=source))
    state = controller.load_view_state()
    if state.is_failed:
        print(f"   ✗ Error loading data: {state.error_message}")
        return 1
    data = state.data
    print(f"   ✓ Loaded {len(data.campaigns)} campaigns")

    print("\n2. Demographic metrics...")
    demo = controller.demographic_metrics(data)
    print(f"   ✓ Male: {format_number(demo.male_clicks)} clicks, "
          f"{format_currency(demo.male_spend)} spend, {format_currency(demo.male_revenue)} revenue")
    print(f"   ✓ Female: {format_number(demo.female_clicks)} clicks, "
          f"{format_currency(demo.female_spend)} spend, {format_currency(demo.female_revenue)} revenue")
    for row in demo.age_group_totals:
        print(f"     {row.age_group:>6}: spend {format_currency(row.spend)}, revenue {format_currency(row.revenue)}")

    print("\n3. Device metrics...")
    devices = controller.device_metrics(data)
    for device in devices.devices:
        print(f"   ✓ {device.device}: revenue {format_currency(device.revenue)} "
              f"({format_share(device.revenue_share)}), CTR {format_percent(device.ctr)}, "
              f"ROAS {format_roas(device.roas)}")
    print(f"   ✓ Campaigns with device revenue: {len(devices.campaign_breakdown)}")

    print("\n4. Regional metrics...")
    regions = controller.regional_metrics(data)
    for region in regions.top_regions_by_revenue:
        print(f"   ✓ {region.region} ({region.country}): revenue {format_currency(region.revenue)}, "
              f"CPC ${region.cpc:,.2f}")
    if regions.country_conflicts:
        print(f"   ! Regions reported under several countries: {regions.country_conflicts}")

    print("\n5. Weekly metrics...")
    weekly = controller.weekly_metrics(data)
    for week in weekly.weeks:
        print(f"   ✓ {week.label}: spend {format_currency(week.spend)}, revenue {format_currency(week.revenue)}")
    print(f"   ✓ Average ROAS: {format_roas(weekly.average_roas)}")
    peak = find_peak(weekly.revenue_by_week)
    if peak is not None:
        print(f"   ✓ Highest revenue week: {peak.label} ({format_currency(peak.value)})")

    print("\n=== Demo completed successfully! ===")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
