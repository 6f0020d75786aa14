"""
Memoization of aggregate results keyed by dataset identity and parameters.
"""

import logging
from typing import Any, Callable, Generic, Hashable, Optional, Tuple, TypeVar

from models.data_models import (
    DemographicMetrics,
    DeviceMetrics,
    MarketingData,
    RegionalMetrics,
    RegionMetric,
    WeeklyMetrics,
)
from .demographic_aggregator import aggregate_demographics
from .device_aggregator import aggregate_devices
from .regional_aggregator import DEFAULT_TOP_REGIONS, aggregate_regions
from .weekly_aggregator import aggregate_weekly

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

R = TypeVar("R")


class MemoizedAggregator(Generic[R]):
    """
    Single-slot cache in front of a pure aggregator.

    The cache key is the identity of the dataset plus the keyword parameters.
    The dataset itself is retained so its id cannot be reused by another
    object while the entry is alive.
    """

    def __init__(self, func: Callable[..., R], name: Optional[str] = None):
        self._func = func
        self.name = name or getattr(func, "__name__", "aggregator")
        self._dataset: Any = None
        self._key: Optional[Tuple[int, Tuple[Tuple[str, Hashable], ...]]] = None
        self._result: Optional[R] = None
        self.hits = 0
        self.misses = 0

    def __call__(self, dataset: MarketingData, **params: Hashable) -> R:
        key = (id(dataset), tuple(sorted(params.items())))
        if self._key == key and self._dataset is dataset:
            self.hits += 1
            return self._result

        self.misses += 1
        logger.info(f"Recomputing {self.name} for {len(dataset.campaigns)} campaigns")
        result = self._func(dataset.campaigns, **params)
        self._dataset = dataset
        self._key = key
        self._result = result
        return result

    def clear(self):
        """Drop the cached entry."""
        self._dataset = None
        self._key = None
        self._result = None


class MetricsCache:
    """One memoized aggregator per dashboard view."""

    def __init__(self, top_regions_limit: int = DEFAULT_TOP_REGIONS):
        self.top_regions_limit = top_regions_limit
        self._demographics: MemoizedAggregator[DemographicMetrics] = MemoizedAggregator(aggregate_demographics)
        self._devices: MemoizedAggregator[DeviceMetrics] = MemoizedAggregator(aggregate_devices)
        self._regions: MemoizedAggregator[RegionalMetrics] = MemoizedAggregator(aggregate_regions)
        self._weekly: MemoizedAggregator[WeeklyMetrics] = MemoizedAggregator(aggregate_weekly)

    def demographics(self, data: MarketingData) -> DemographicMetrics:
        return self._demographics(data)

    def devices(self, data: MarketingData) -> DeviceMetrics:
        return self._devices(data)

    def regions(self, data: MarketingData, selected_metric: Any = RegionMetric.REVENUE) -> RegionalMetrics:
        return self._regions(
            data,
            selected_metric=RegionMetric.parse(selected_metric),
            top_n=self.top_regions_limit,
        )

    def weekly(self, data: MarketingData) -> WeeklyMetrics:
        return self._weekly(data)

    def clear(self):
        for aggregator in (self._demographics, self._devices, self._regions, self._weekly):
            aggregator.clear()

    def get_stats(self):
        """Hit/miss counters per view."""
        return {
            aggregator.name: {'hits': aggregator.hits, 'misses': aggregator.misses}
            for aggregator in (self._demographics, self._devices, self._regions, self._weekly)
        }
