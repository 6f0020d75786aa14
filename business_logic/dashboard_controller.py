"""
Dashboard Controller - Orchestrates data loading and per-view metrics.

Turns the data layer's result into an explicit ViewState and hands out
memoized aggregates for each dashboard screen.
"""

import logging
from typing import Any, Dict, Optional

from models.data_models import (
    DemographicMetrics,
    DeviceMetrics,
    MarketingData,
    RegionalMetrics,
    RegionMetric,
    ViewState,
    WeeklyMetrics,
)
from data.manager import DataManager
from .error_handler import DataLoadError, error_handler
from .metrics_cache import MetricsCache
from .regional_aggregator import DEFAULT_TOP_REGIONS

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class DashboardController:
    """
    Main controller for the dashboard workflow.

    Fetches the dataset once per rerun (served from the data manager's cache
    when unchanged) and computes view metrics through a shared cache.
    """

    def __init__(self, data_manager: Optional[DataManager] = None,
                 top_regions_limit: int = DEFAULT_TOP_REGIONS):
        """
        Initialize the dashboard controller.

        Args:
            data_manager: Optional DataManager instance
            top_regions_limit: Size of the regional top-by-revenue subset
        """
        self.data_manager = data_manager or DataManager()
        self.metrics_cache = MetricsCache(top_regions_limit=top_regions_limit)
        self.last_notification: Optional[Dict[str, Any]] = None

        logger.info("DashboardController initialized")

    def load_view_state(self, source: Optional[str] = None) -> ViewState:
        """
        Load the marketing dataset into a ViewState.

        Args:
            source: Optional file path or URL overriding the data manager default

        Returns:
            ViewState.loaded(data) on success, ViewState.failed(message) otherwise
        """
        try:
            data = self.data_manager.load_marketing_data(source)
        except DataLoadError as e:
            error_info = error_handler.classify_error(e, "marketing data load")
            error_handler.log_error(error_info, "Dashboard")
            self.last_notification = error_handler.create_user_notification(error_info)
            return ViewState.failed(error_info.user_message)

        self.last_notification = None
        return ViewState.loaded(data)

    def demographic_metrics(self, data: MarketingData) -> DemographicMetrics:
        return self.metrics_cache.demographics(data)

    def device_metrics(self, data: MarketingData) -> DeviceMetrics:
        return self.metrics_cache.devices(data)

    def regional_metrics(self, data: MarketingData,
                         selected_metric: Any = RegionMetric.REVENUE) -> RegionalMetrics:
        return self.metrics_cache.regions(data, selected_metric)

    def weekly_metrics(self, data: MarketingData) -> WeeklyMetrics:
        return self.metrics_cache.weekly(data)
