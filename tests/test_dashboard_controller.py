"""
Tests for the dashboard controller and error handling.
"""

import os
import shutil
import tempfile
from unittest.mock import Mock

import pytest

from business_logic.dashboard_controller import DashboardController
from business_logic.error_handler import (
    DataLoadError,
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
)
from data.manager import DataManager
from models.data_models import Campaign, MarketingData, ViewState, ViewStatus


class TestViewState:

    def test_constructors(self):
        data = MarketingData(campaigns=())

        assert ViewState.loading().status is ViewStatus.LOADING
        loaded = ViewState.loaded(data)
        assert loaded.is_loaded
        assert loaded.data is data
        failed = ViewState.failed("boom")
        assert failed.is_failed
        assert failed.error_message == "boom"
        assert failed.data is None


class TestErrorHandler:

    def setup_method(self):
        self.handler = ErrorHandler()

    def test_data_load_error_message_kept_verbatim(self):
        error = DataLoadError("Failed to fetch marketing data: HTTP 500", source="https://x")
        info = self.handler.classify_error(error, "load")

        assert info.category is ErrorCategory.DATA_LOAD
        assert info.severity is ErrorSeverity.ERROR
        assert info.user_message == "Failed to fetch marketing data: HTTP 500"
        assert "https://x" in info.message

    def test_unexpected_error(self):
        info = self.handler.classify_error(RuntimeError(""), "load")
        assert info.category is ErrorCategory.SYSTEM_ERROR
        assert info.severity is ErrorSeverity.CRITICAL
        assert info.user_message == "Failed to load data"

    def test_notification(self):
        info = self.handler.classify_error(DataLoadError("bad file"), "load")
        notification = self.handler.create_user_notification(info)

        assert notification['type'] == 'error'
        assert notification['title'] == "Error loading data"
        assert notification['message'] == "bad file"
        assert 'technical_details' not in notification

    def test_critical_notification_has_details(self):
        info = self.handler.classify_error(KeyError("x"), "load")
        notification = self.handler.create_user_notification(info)
        assert notification['title'] == "System Error"
        assert 'technical_details' in notification

    def test_history_and_statistics(self):
        assert self.handler.get_error_statistics() == {'total_errors': 0}

        for _ in range(3):
            self.handler.log_error(self.handler.classify_error(DataLoadError("x")), "test")
        stats = self.handler.get_error_statistics()

        assert stats['total_errors'] == 3
        assert stats['recent_errors_24h'] == 3
        assert stats['category_breakdown'] == {'data_load': 3}

    def test_history_is_capped(self):
        info = self.handler.classify_error(DataLoadError("x"))
        for _ in range(ErrorHandler.max_history + 5):
            self.handler.log_error(info)
        assert len(self.handler.error_history) == ErrorHandler.max_history


class TestDashboardController:

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.data_file = os.path.join(self.temp_dir, 'marketing_data.json')
        with open(self.data_file, 'w') as f:
            f.write('{"campaigns": [{"id": "CMP-1", "name": "One", "medium": "Search", '
                    '"spend": 100, "revenue": 300, '
                    '"device_performance": [{"device": "Desktop", "spend": 100, "revenue": 300}]}]}')
        self.controller = DashboardController(DataManager(source=self.data_file))

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_loaded_state(self):
        state = self.controller.load_view_state()

        assert state.is_loaded
        assert state.data.campaigns[0].id == "CMP-1"
        assert self.controller.last_notification is None

    def test_failed_state_carries_message(self):
        missing = os.path.join(self.temp_dir, 'missing.json')
        state = self.controller.load_view_state(missing)

        assert state.is_failed
        assert state.data is None
        assert state.error_message == f"Marketing data file not found: {missing}"
        assert self.controller.last_notification['title'] == "Error loading data"

    def test_failure_message_from_data_layer_is_not_rewritten(self):
        data_manager = Mock()
        data_manager.load_marketing_data.side_effect = DataLoadError("Failed to fetch marketing data: HTTP 500")
        controller = DashboardController(data_manager)

        state = controller.load_view_state()
        assert state.error_message == "Failed to fetch marketing data: HTTP 500"

    def test_unexpected_errors_propagate(self):
        data_manager = Mock()
        data_manager.load_marketing_data.side_effect = RuntimeError("bug")
        controller = DashboardController(data_manager)

        with pytest.raises(RuntimeError):
            controller.load_view_state()

    def test_metrics_reuse_cached_dataset(self):
        first = self.controller.load_view_state()
        second = self.controller.load_view_state()

        devices = self.controller.device_metrics(first.data)
        assert self.controller.device_metrics(second.data) is devices
        assert devices.desktop_share == pytest.approx(100)

    def test_all_views(self):
        data = self.controller.load_view_state().data

        assert self.controller.demographic_metrics(data).male_spend == 0
        assert self.controller.regional_metrics(data, "spend").region_count == 0
        assert self.controller.weekly_metrics(data).week_count == 0

    def test_top_regions_limit(self):
        rows = [{"region": f"R{i}", "country": "X", "revenue": i} for i in range(5)]
        data = MarketingData(campaigns=(Campaign.from_dict({"id": "c", "regional_performance": rows}),))
        controller = DashboardController(Mock(), top_regions_limit=2)

        top = controller.regional_metrics(data).top_regions_by_revenue
        assert [r.region for r in top] == ["R4", "R3"]
