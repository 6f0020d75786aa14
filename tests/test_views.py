"""
Tests for the dashboard screens, rendered against a mocked Streamlit module.
"""

from unittest.mock import MagicMock, Mock, patch

import pytest

from business_logic.dashboard_controller import DashboardController
from business_logic.device_aggregator import aggregate_devices
from business_logic.demographic_aggregator import aggregate_demographics
from business_logic.error_handler import DataLoadError
from models.data_models import Campaign, MarketingData, RegionMetric, ViewState
from ui.views import (
    REGION_METRIC_STATE_KEY,
    REGION_METRIC_WIDGET_KEY,
    DemographicView,
    DeviceView,
    RegionView,
    WeeklyView,
    age_group_chart_points,
    campaign_breakdown_rows,
)


def make_streamlit_mock():
    st = MagicMock()
    st.session_state = {}
    st.columns.side_effect = lambda spec: [MagicMock() for _ in range(spec if isinstance(spec, int) else len(spec))]
    st.selectbox.side_effect = lambda label, options, index=0, key=None: options[index]
    st.toggle.side_effect = lambda label, value=False, key=None: value
    st.radio.side_effect = lambda label, options, index=0, **kwargs: options[index]
    return st


@pytest.fixture
def mock_st():
    st = make_streamlit_mock()
    with patch('ui.views.st', st), patch('ui.components.st', st):
        yield st


def build_data():
    campaigns = (
        Campaign.from_dict({
            "id": "CMP-1", "name": "Launch", "medium": "Search", "spend": 1000, "revenue": 3000,
            "demographic_breakdown": [
                {"gender": "Male", "age_group": "25-34", "percentage_of_audience": 40,
                 "performance": {"impressions": 1000, "clicks": 40, "conversions": 4}},
                {"gender": "Female", "age_group": "18-24", "percentage_of_audience": 60,
                 "performance": {"impressions": 2000, "clicks": 100, "conversions": 10}},
            ],
            "device_performance": [
                {"device": "Mobile", "impressions": 2000, "clicks": 100, "conversions": 10, "spend": 600, "revenue": 2000},
                {"device": "Desktop", "impressions": 1000, "clicks": 40, "conversions": 4, "spend": 400, "revenue": 1000},
            ],
            "regional_performance": [
                {"region": "Dubai", "country": "UAE", "impressions": 2000, "clicks": 90, "spend": 700, "revenue": 2200},
                {"region": "Riyadh", "country": "Saudi Arabia", "impressions": 1000, "clicks": 50, "spend": 300, "revenue": 800},
            ],
            "weekly_performance": [
                {"week_start": "2024-01-08", "spend": 600, "revenue": 1800},
                {"week_start": "2024-01-01", "spend": 400, "revenue": 1200},
            ],
        }),
    )
    return MarketingData(campaigns=campaigns)


class TestViewHelpers:

    def test_campaign_breakdown_rows(self):
        metrics = aggregate_devices(build_data().campaigns)
        rows = campaign_breakdown_rows(metrics)

        assert len(rows) == 1
        row = rows[0]
        assert row["campaign_name"] == "Launch"
        assert row["mobile_revenue"] == 2000
        assert row["mobile_roas"] == pytest.approx(2000 / 600)
        assert row["desktop_roas"] == pytest.approx(2.5)
        assert row["tablet_revenue"] == 0
        assert row["tablet_roas"] == 0

    def test_age_group_chart_points(self):
        metrics = aggregate_demographics(build_data().campaigns)
        points = age_group_chart_points(metrics, "spend", "#3B82F6")

        assert [p.label for p in points] == ["18-24", "25-34"]
        assert [p.value for p in points] == [pytest.approx(600), pytest.approx(400)]
        assert all(p.color == "#3B82F6" for p in points)


class TestViewStates:

    def setup_method(self):
        self.controller = DashboardController(Mock())

    def test_failed_state_shows_banner_only(self, mock_st):
        DeviceView(self.controller).render(ViewState.failed("Failed to fetch marketing data: HTTP 500"))

        mock_st.error.assert_called_once_with("Error loading data: Failed to fetch marketing data: HTTP 500")
        mock_st.title.assert_not_called()
        mock_st.plotly_chart.assert_not_called()

    def test_loading_state(self, mock_st):
        WeeklyView(self.controller).render(ViewState.loading())

        mock_st.title.assert_called_once_with("Weekly Performance")
        mock_st.info.assert_called_once_with("Loading...")


class TestLoadedViews:

    def setup_method(self):
        self.controller = DashboardController(Mock())
        self.state = ViewState.loaded(build_data())

    def test_demographic_view(self, mock_st):
        DemographicView(self.controller).render(self.state)

        mock_st.title.assert_called_once_with("Demographic Performance")
        mock_st.metric.assert_any_call(label="🖱️ Total Clicks by Males", value="40")
        mock_st.metric.assert_any_call(label="💵 Total Spend by Females", value="$600")
        assert mock_st.plotly_chart.call_count == 2
        assert mock_st.dataframe.call_count == 2

    def test_device_view(self, mock_st):
        DeviceView(self.controller).render(self.state)

        mock_st.metric.assert_any_call(label="📈 Total Revenue", value="$3,000")
        assert mock_st.plotly_chart.call_count == 4
        assert mock_st.progress.call_count == 3
        assert mock_st.dataframe.call_count == 2

    def test_region_view_uses_selected_metric(self, mock_st):
        mock_st.session_state["region_selected_metric"] = "impressions"
        view = RegionView(self.controller)
        view.render(self.state)

        radio_kwargs = mock_st.radio.call_args.kwargs
        assert radio_kwargs["index"] == 2
        assert self.controller.metrics_cache.get_stats()['aggregate_regions']['misses'] == 1
        mock_st.subheader.assert_any_call("Regional Impressions Distribution")
        mock_st.warning.assert_not_called()

    def test_region_view_default_metric(self, mock_st):
        RegionView(self.controller, default_metric="spend").render(self.state)

        assert mock_st.radio.call_args.kwargs["index"] == 1
        mock_st.subheader.assert_any_call("Regional Spend Distribution")

    def test_region_view_reports_country_conflicts(self, mock_st):
        extra = Campaign.from_dict({"id": "CMP-2", "regional_performance": [
            {"region": "Dubai", "country": "Oman", "revenue": 10},
        ]})
        state = ViewState.loaded(MarketingData(campaigns=build_data().campaigns + (extra,)))
        RegionView(self.controller).render(state)

        warning = mock_st.warning.call_args.args[0]
        assert "Dubai: Oman, UAE" in warning

    def test_weekly_view_insights(self, mock_st):
        WeeklyView(self.controller).render(self.state)

        mock_st.write.assert_any_call("**Highest Revenue Week:** Jan 8")
        mock_st.write.assert_any_call("**Peak Spend:** $600")
        assert mock_st.plotly_chart.call_count == 2

    def test_weekly_view_without_weeks(self, mock_st):
        state = ViewState.loaded(MarketingData(campaigns=(Campaign.from_dict({"id": "c"}),)))
        WeeklyView(self.controller).render(state)

        mock_st.info.assert_any_call("No weekly data available")
        mock_st.plotly_chart.assert_not_called()

    def test_region_metric_default_is_parsed(self):
        assert RegionView(self.controller, "clicks").default_metric is RegionMetric.CLICKS


class TestErrorBanner:

    def test_banner_uses_notification_title_from_failed_load(self, mock_st):
        data_manager = Mock()
        data_manager.load_marketing_data.side_effect = DataLoadError("Marketing data file not found: x.json")
        controller = DashboardController(data_manager)

        state = controller.load_view_state()
        DemographicView(controller).render(state)

        mock_st.error.assert_called_once_with("Error loading data: Marketing data file not found: x.json")

    def test_banner_title_follows_notification(self, mock_st):
        controller = DashboardController(Mock())
        controller.last_notification = {'title': "Data unavailable"}

        WeeklyView(controller).render(ViewState.failed("timeout"))
        mock_st.error.assert_called_once_with("Data unavailable: timeout")


class TestRegionMetricPersistence:

    def setup_method(self):
        self.controller = DashboardController(Mock())
        self.state = ViewState.loaded(build_data())

    def test_radio_keeps_widget_and_saved_choice_apart(self, mock_st):
        RegionView(self.controller).render(self.state)

        kwargs = mock_st.radio.call_args.kwargs
        assert kwargs["key"] == REGION_METRIC_WIDGET_KEY
        assert kwargs["key"] != REGION_METRIC_STATE_KEY
        assert kwargs["on_change"] is not None

    def test_choice_survives_switching_views(self, mock_st):
        RegionView(self.controller).render(self.state)
        on_change = mock_st.radio.call_args.kwargs["on_change"]

        # User picks clicks on the radio
        mock_st.session_state[REGION_METRIC_WIDGET_KEY] = "clicks"
        on_change()
        assert mock_st.session_state[REGION_METRIC_STATE_KEY] == "clicks"

        # Another view is shown, so Streamlit drops the widget's state
        del mock_st.session_state[REGION_METRIC_WIDGET_KEY]
        WeeklyView(self.controller).render(self.state)

        RegionView(self.controller).render(self.state)
        assert mock_st.radio.call_args.kwargs["index"] == 3
        mock_st.subheader.assert_any_call("Regional Clicks Distribution")
