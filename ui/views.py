"""
The four dashboard screens: demographic, device, regional and weekly.
"""

import logging
from typing import Any, Dict, List, Optional

import streamlit as st

from business_logic.dashboard_controller import DashboardController
from business_logic.weekly_aggregator import find_peak
from models.data_models import (
    DemographicMetrics,
    DeviceMetrics,
    DeviceType,
    RegionMetric,
    SeriesPoint,
    ViewState,
)
from .components import (
    DEFAULT_ERROR_TITLE,
    ColumnSpec,
    SortSpec,
    render_bar_chart,
    render_bubble_map,
    render_line_chart,
    render_metric_row,
    render_page_header,
    render_share_bars,
    render_sortable_table,
)
from .formatting import (
    format_currency,
    format_number,
    format_percent,
    format_region_metric,
    format_roas,
    format_share,
    region_metric_label,
)

logger = logging.getLogger(__name__)

DEVICE_COLORS = {
    DeviceType.MOBILE.value: "#3B82F6",
    DeviceType.DESKTOP.value: "#8B5CF6",
    DeviceType.TABLET.value: "#10B981",
}
DEVICE_ICONS = {
    DeviceType.MOBILE.value: "📱",
    DeviceType.DESKTOP.value: "🖥️",
    DeviceType.TABLET.value: "📟",
}
REGION_METRIC_STATE_KEY = "region_selected_metric"
# Radio widget state is dropped while another view is shown; the choice lives under REGION_METRIC_STATE_KEY
REGION_METRIC_WIDGET_KEY = "region_metric_radio"


def _currency_cell(value, row):
    return format_currency(value)


def _number_cell(value, row):
    return format_number(value)


def _percent_cell(value, row):
    return format_percent(value)


def _roas_cell(value, row):
    return format_roas(value)


def _remember_region_metric():
    st.session_state[REGION_METRIC_STATE_KEY] = st.session_state[REGION_METRIC_WIDGET_KEY]


def age_group_columns() -> List[ColumnSpec]:
    return [
        ColumnSpec("age_group", "Age Group", "15%", sort_type="string"),
        ColumnSpec("impressions", "Impressions", "17%", "right", render=_number_cell),
        ColumnSpec("clicks", "Clicks", "17%", "right", render=_number_cell),
        ColumnSpec("conversions", "Conversions", "17%", "right", render=_number_cell),
        ColumnSpec("ctr", "CTR", "17%", "right", render=_percent_cell),
        ColumnSpec("conversion_rate", "Conversion Rate", "17%", "right", render=_percent_cell),
    ]


def device_columns() -> List[ColumnSpec]:
    return [
        ColumnSpec("device", "Device", "12%", sort_type="string",
                   render=lambda value, row: f"{DEVICE_ICONS.get(value, '')} {value}".strip()),
        ColumnSpec("impressions", "Impressions", "13%", "right", render=_number_cell),
        ColumnSpec("clicks", "Clicks", "11%", "right", render=_number_cell),
        ColumnSpec("conversions", "Conversions", "12%", "right", render=_number_cell),
        ColumnSpec("spend", "Spend", "13%", "right", render=_currency_cell),
        ColumnSpec("revenue", "Revenue", "13%", "right", render=_currency_cell),
        ColumnSpec("ctr", "CTR", "10%", "right", render=_percent_cell),
        ColumnSpec("conversion_rate", "Conv. Rate", "10%", "right", render=_percent_cell),
        ColumnSpec("roas", "ROAS", "8%", "right", render=_roas_cell),
    ]


def campaign_breakdown_columns() -> List[ColumnSpec]:
    columns = [
        ColumnSpec("campaign_name", "Campaign", "22%", sort_type="string"),
        ColumnSpec("medium", "Medium", "12%", sort_type="string"),
    ]
    for device in DeviceType:
        prefix = device.value.lower()
        columns.append(ColumnSpec(f"{prefix}_revenue", f"{device.value} Revenue", "11%", "right",
                                  render=_currency_cell))
        columns.append(ColumnSpec(f"{prefix}_roas", f"{device.value} ROAS", "11%", "right",
                                  render=_roas_cell))
    return columns


def campaign_breakdown_rows(metrics: DeviceMetrics) -> List[Dict[str, Any]]:
    """Flatten per-campaign device splits into one row per campaign."""
    rows = []
    for record in metrics.campaign_breakdown:
        row: Dict[str, Any] = {
            "campaign_id": record.campaign_id,
            "campaign_name": record.campaign_name,
            "medium": record.medium,
        }
        for device in DeviceType:
            split = record.devices[device.value]
            prefix = device.value.lower()
            row[f"{prefix}_revenue"] = split.revenue
            row[f"{prefix}_spend"] = split.spend
            row[f"{prefix}_conversions"] = split.conversions
            row[f"{prefix}_roas"] = split.roas
        rows.append(row)
    return rows


def region_columns() -> List[ColumnSpec]:
    return [
        ColumnSpec("region", "Region", "15%", sort_type="string",
                   render=lambda value, row: f"{value} ({row.get('country', '')})"),
        ColumnSpec("impressions", "Impressions", "12%", "right", render=_number_cell),
        ColumnSpec("clicks", "Clicks", "10%", "right", render=_number_cell),
        ColumnSpec("conversions", "Conversions", "10%", "right", render=_number_cell),
        ColumnSpec("spend", "Spend", "12%", "right", render=_currency_cell),
        ColumnSpec("revenue", "Revenue", "12%", "right", render=_currency_cell),
        ColumnSpec("ctr", "CTR", "8%", "right", render=_percent_cell),
        ColumnSpec("conversion_rate", "Conv. Rate", "8%", "right", render=_percent_cell),
        ColumnSpec("roas", "ROAS", "7%", "right", render=_roas_cell),
        ColumnSpec("cpc", "CPC", "6%", "right", render=lambda value, row: f"${value:,.2f}"),
    ]


def age_group_chart_points(metrics: DemographicMetrics, field: str, color: str) -> List[SeriesPoint]:
    """Chart points for spend or revenue by age group, already in rank order."""
    return [
        SeriesPoint(label=row.age_group, value=getattr(row, field), color=color)
        for row in metrics.age_group_totals
    ]


class BaseView:
    """Shared header handling for dashboard screens."""

    title = ""

    def __init__(self, controller: DashboardController):
        self.controller = controller

    def render(self, state: ViewState):
        if state.is_failed:
            notification = self.controller.last_notification or {}
            render_page_header(
                self.title,
                state.error_message,
                notification.get("title", DEFAULT_ERROR_TITLE),
            )
            return
        render_page_header(self.title)
        if not state.is_loaded:
            st.info("Loading...")
            return
        self.render_content(state)

    def render_content(self, state: ViewState):
        raise NotImplementedError


class DemographicView(BaseView):
    """Gender totals, age-group charts and per-gender age-group tables."""

    title = "Demographic Performance"

    def render_content(self, state: ViewState):
        metrics = self.controller.demographic_metrics(state.data)

        st.subheader("👨 Male Performance Metrics")
        render_metric_row([
            ("Total Clicks by Males", format_number(metrics.male_clicks), "🖱️"),
            ("Total Spend by Males", format_currency(metrics.male_spend), "💵"),
            ("Total Revenue by Males", format_currency(metrics.male_revenue), "📈"),
        ])

        st.subheader("👩 Female Performance Metrics")
        render_metric_row([
            ("Total Clicks by Females", format_number(metrics.female_clicks), "🖱️"),
            ("Total Spend by Females", format_currency(metrics.female_spend), "💵"),
            ("Total Revenue by Females", format_currency(metrics.female_revenue), "💰"),
        ])

        col1, col2 = st.columns(2)
        with col1:
            render_bar_chart(
                age_group_chart_points(metrics, "spend", "#3B82F6"),
                "Total Spend by Age Group",
                format_value=format_currency,
            )
        with col2:
            render_bar_chart(
                age_group_chart_points(metrics, "revenue", "#10B981"),
                "Total Revenue by Age Group",
                format_value=format_currency,
            )

        render_sortable_table(
            "Campaign Performance by Male Age Groups",
            age_group_columns(),
            metrics.male_age_groups,
            default_sort=SortSpec("clicks", "desc"),
            empty_message="No male demographic data available",
            key="male_age_groups",
        )
        render_sortable_table(
            "Campaign Performance by Female Age Groups",
            age_group_columns(),
            metrics.female_age_groups,
            default_sort=SortSpec("clicks", "desc"),
            empty_message="No female demographic data available",
            key="female_age_groups",
        )


class DeviceView(BaseView):
    """Device totals, per-device cards, comparison charts and tables."""

    title = "Device Performance Analysis"

    def render_content(self, state: ViewState):
        metrics = self.controller.device_metrics(state.data)

        st.subheader("🎯 Overall Performance Metrics")
        render_metric_row([
            ("Total Revenue", format_currency(metrics.total_revenue), "📈"),
            ("Total Spend", format_currency(metrics.total_spend), "💵"),
            ("Total Conversions", format_number(metrics.total_conversions), "🎯"),
            ("Total Clicks", format_number(metrics.total_clicks), "👥"),
        ])

        st.subheader("Performance by Device Type")
        columns = st.columns(len(metrics.devices))
        for column, device in zip(columns, metrics.devices):
            with column:
                st.markdown(f"### {DEVICE_ICONS.get(device.device, '')} {device.device}")
                st.metric("Revenue", format_currency(device.revenue))
                st.metric("Conversions", format_number(device.conversions))
                st.metric("ROAS", format_roas(device.roas))
                st.metric("Conv. Rate", format_percent(device.conversion_rate))

        col1, col2 = st.columns(2)
        with col1:
            render_bar_chart(
                [SeriesPoint(d.device, d.revenue, DEVICE_COLORS.get(d.device)) for d in metrics.devices],
                "Revenue by Device",
                format_value=format_currency,
                height=350,
            )
        with col2:
            render_bar_chart(
                [SeriesPoint(d.device, d.conversions, DEVICE_COLORS.get(d.device)) for d in metrics.devices],
                "Conversions by Device",
                height=350,
            )

        col1, col2 = st.columns(2)
        with col1:
            render_bar_chart(
                [SeriesPoint(d.device, d.ctr, "#F59E0B") for d in metrics.devices],
                "Click-Through Rate (CTR) by Device",
                format_value=format_percent,
                height=350,
            )
        with col2:
            render_bar_chart(
                [SeriesPoint(d.device, d.roas, "#EF4444") for d in metrics.devices],
                "Return on Ad Spend (ROAS) by Device",
                format_value=format_roas,
                height=350,
            )

        render_share_bars(
            "Revenue Distribution",
            [
                (d.device, d.revenue_share, f"{format_share(d.revenue_share)} ({format_currency(d.revenue)})")
                for d in metrics.devices
            ],
        )

        render_sortable_table(
            "Detailed Device Performance Metrics",
            device_columns(),
            metrics.devices,
            default_sort=SortSpec("revenue", "desc"),
            empty_message="No device data available",
            key="devices",
        )
        render_sortable_table(
            "Campaign Revenue by Device",
            campaign_breakdown_columns(),
            campaign_breakdown_rows(metrics),
            default_sort=SortSpec("mobile_revenue", "desc"),
            empty_message="No campaign device data available",
            key="campaign_devices",
        )


class RegionView(BaseView):
    """Regional totals, metric-driven bubble map, top regions and table."""

    title = "Regional Performance"

    def __init__(self, controller: DashboardController,
                 default_metric: RegionMetric = RegionMetric.REVENUE):
        super().__init__(controller)
        self.default_metric = RegionMetric.parse(default_metric)

    def _select_metric(self) -> RegionMetric:
        options = [metric.value for metric in RegionMetric]
        current = st.session_state.get(REGION_METRIC_STATE_KEY, self.default_metric.value)
        selected = st.radio(
            "Bubble map metric",
            options,
            index=options.index(current) if current in options else 0,
            format_func=region_metric_label,
            horizontal=True,
            key=REGION_METRIC_WIDGET_KEY,
            on_change=_remember_region_metric,
        )
        return RegionMetric.parse(selected)

    def render_content(self, state: ViewState):
        st.subheader("Regional Bubble Map")
        selected_metric = self._select_metric()
        metrics = self.controller.regional_metrics(state.data, selected_metric)

        render_metric_row([
            ("Total Revenue", format_currency(metrics.total_revenue), "📈"),
            ("Total Spend", format_currency(metrics.total_spend), "💵"),
            ("Total Impressions", format_number(metrics.total_impressions), "👥"),
            ("Total Conversions", format_number(metrics.total_conversions), "🎯"),
        ])

        if metrics.country_conflicts:
            conflicts = "; ".join(
                f"{region}: {', '.join(countries)}" for region, countries in metrics.country_conflicts.items()
            )
            st.warning(f"Some regions are reported under more than one country and were merged: {conflicts}")

        render_bubble_map(
            metrics.regions,
            selected_metric,
            f"Regional {region_metric_label(selected_metric)} Distribution",
            format_value=lambda value: format_region_metric(selected_metric, value),
        )

        render_bar_chart(
            [SeriesPoint(r.region, r.revenue, "#10B981") for r in metrics.top_regions_by_revenue],
            "Top Regions by Revenue",
            format_value=format_currency,
            height=350,
        )

        render_sortable_table(
            f"Detailed Regional Performance ({metrics.region_count} regions)",
            region_columns(),
            metrics.regions,
            default_sort=SortSpec("revenue", "desc"),
            empty_message="No regional data available",
            key="regions",
        )


class WeeklyView(BaseView):
    """Weekly totals, revenue/spend trends and peak-week insights."""

    title = "Weekly Performance"

    def render_content(self, state: ViewState):
        metrics = self.controller.weekly_metrics(state.data)

        st.subheader(f"📅 Weekly Overview ({metrics.week_count} weeks)")
        render_metric_row([
            ("Total Spend", format_currency(metrics.total_spend), "💵"),
            ("Total Revenue", format_currency(metrics.total_revenue), "📈"),
            ("Average ROAS", format_roas(metrics.average_roas), "⚡"),
            ("Total Impressions", format_number(metrics.total_impressions), "📈"),
        ])

        col1, col2 = st.columns(2)
        with col1:
            render_line_chart(
                metrics.revenue_by_week,
                "Revenue by Week",
                format_value=format_currency,
                height=350,
                line_color="#10B981",
                fill_color="rgba(16, 185, 129, 0.1)",
                show_values=True,
            )
        with col2:
            render_line_chart(
                metrics.spend_by_week,
                "Spend by Week",
                format_value=format_currency,
                height=350,
                line_color="#EF4444",
                fill_color="rgba(239, 68, 68, 0.1)",
                show_values=True,
            )

        self._render_insights(find_peak(metrics.revenue_by_week), find_peak(metrics.spend_by_week))

    def _render_insights(self, revenue_peak: Optional[SeriesPoint], spend_peak: Optional[SeriesPoint]):
        st.subheader("Weekly Performance Insights")
        if revenue_peak is None or spend_peak is None:
            st.info("No weekly data available")
            return

        col1, col2 = st.columns(2)
        with col1:
            st.write(f"**Highest Revenue Week:** {revenue_peak.label}")
            st.write(f"**Peak Revenue:** {format_currency(revenue_peak.value)}")
        with col2:
            st.write(f"**Highest Spend Week:** {spend_peak.label}")
            st.write(f"**Peak Spend:** {format_currency(spend_peak.value)}")
