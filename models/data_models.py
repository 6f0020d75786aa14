"""
Core data models for the campaign performance dashboard.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


def _to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a payload value to a number, treating null, garbage, NaN and infinity as the default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


class Gender(Enum):
    """Gender buckets tracked by the demographic view."""
    MALE = "Male"
    FEMALE = "Female"

    @classmethod
    def from_label(cls, label: str) -> Optional["Gender"]:
        for member in cls:
            if member.value == label:
                return member
        return None


class DeviceType(Enum):
    """Device buckets tracked by the device view, in canonical order."""
    MOBILE = "Mobile"
    DESKTOP = "Desktop"
    TABLET = "Tablet"

    @classmethod
    def from_label(cls, label: str) -> Optional["DeviceType"]:
        for member in cls:
            if member.value == label:
                return member
        return None


class RegionMetric(Enum):
    """Metric keys selectable on the regional view."""
    REVENUE = "revenue"
    SPEND = "spend"
    IMPRESSIONS = "impressions"
    CLICKS = "clicks"
    CONVERSIONS = "conversions"

    @classmethod
    def parse(cls, value: Any) -> "RegionMetric":
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(
            f"Unknown region metric: {value!r}. "
            f"Expected one of: {', '.join(m.value for m in cls)}"
        )


AGE_GROUP_ORDER: Tuple[str, ...] = ("18-24", "25-34", "35-44", "45-54", "55+")
UNRANKED_AGE_GROUP = 99


class ViewStatus(Enum):
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DemographicSlice:
    """One demographic cell's share of a campaign audience and its raw counts."""
    gender: str
    age_group: str
    percentage_of_audience: float
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "DemographicSlice":
        performance = row.get("performance") or {}
        return cls(
            gender=_to_text(row.get("gender")),
            age_group=_to_text(row.get("age_group")),
            percentage_of_audience=_to_number(row.get("percentage_of_audience")),
            impressions=_to_number(performance.get("impressions")),
            clicks=_to_number(performance.get("clicks")),
            conversions=_to_number(performance.get("conversions")),
        )


@dataclass(frozen=True)
class DeviceSlice:
    """Device-native performance counters for one campaign."""
    device: str
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0
    spend: float = 0
    revenue: float = 0

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "DeviceSlice":
        return cls(
            device=_to_text(row.get("device")),
            impressions=_to_number(row.get("impressions")),
            clicks=_to_number(row.get("clicks")),
            conversions=_to_number(row.get("conversions")),
            spend=_to_number(row.get("spend")),
            revenue=_to_number(row.get("revenue")),
        )


@dataclass(frozen=True)
class RegionSlice:
    """Regional performance counters for one campaign."""
    region: str
    country: str
    impressions: float = 0
    clicks: float = 0
    conversions: float = 0
    spend: float = 0
    revenue: float = 0

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "RegionSlice":
        return cls(
            region=_to_text(row.get("region")),
            country=_to_text(row.get("country")),
            impressions=_to_number(row.get("impressions")),
            clicks=_to_number(row.get("clicks")),
            conversions=_to_number(row.get("conversions")),
            spend=_to_number(row.get("spend")),
            revenue=_to_number(row.get("revenue")),
        )


@dataclass(frozen=True)
class WeekSlice:
    """Weekly performance counters keyed by the ISO week start date."""
    week_start: str
    spend: float = 0
    revenue: float = 0
    impressions: float = 0
    clicks: float = 0

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "WeekSlice":
        return cls(
            week_start=_to_text(row.get("week_start")),
            spend=_to_number(row.get("spend")),
            revenue=_to_number(row.get("revenue")),
            impressions=_to_number(row.get("impressions")),
            clicks=_to_number(row.get("clicks")),
        )


@dataclass(frozen=True)
class Campaign:
    """A campaign with its optional nested breakdowns."""
    id: str
    name: str
    medium: str
    spend: float = 0
    revenue: float = 0
    demographic_breakdown: Tuple[DemographicSlice, ...] = ()
    device_performance: Tuple[DeviceSlice, ...] = ()
    regional_performance: Tuple[RegionSlice, ...] = ()
    weekly_performance: Tuple[WeekSlice, ...] = ()

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Campaign":
        return cls(
            id=_to_text(row.get("id")),
            name=_to_text(row.get("name")),
            medium=_to_text(row.get("medium")),
            spend=_to_number(row.get("spend")),
            revenue=_to_number(row.get("revenue")),
            demographic_breakdown=tuple(
                DemographicSlice.from_dict(item) for item in row.get("demographic_breakdown") or ()
            ),
            device_performance=tuple(
                DeviceSlice.from_dict(item) for item in row.get("device_performance") or ()
            ),
            regional_performance=tuple(
                RegionSlice.from_dict(item) for item in row.get("regional_performance") or ()
            ),
            weekly_performance=tuple(
                WeekSlice.from_dict(item) for item in row.get("weekly_performance") or ()
            ),
        )


@dataclass(frozen=True)
class MarketingData:
    """The full fetched dataset. Unrecognised top-level fields are kept in extras."""
    campaigns: Tuple[Campaign, ...]
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)


# ---------------------------------------------------------------------------
# Derived aggregates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeriesPoint:
    """A labelled value for bar and line charts."""
    label: str
    value: float
    color: Optional[str] = None


@dataclass(frozen=True)
class AgeGroupSpend:
    age_group: str
    spend: float
    revenue: float


@dataclass(frozen=True)
class AgeGroupPerformance:
    age_group: str
    impressions: float
    clicks: float
    conversions: float
    campaigns: int
    ctr: float
    conversion_rate: float


@dataclass(frozen=True)
class DemographicMetrics:
    """Gender totals and age-group breakdowns for the demographic view."""
    male_clicks: float
    male_spend: float
    male_revenue: float
    female_clicks: float
    female_spend: float
    female_revenue: float
    age_group_totals: Tuple[AgeGroupSpend, ...]
    male_age_groups: Tuple[AgeGroupPerformance, ...]
    female_age_groups: Tuple[AgeGroupPerformance, ...]


@dataclass(frozen=True)
class DevicePerformance:
    device: str
    impressions: float
    clicks: float
    conversions: float
    spend: float
    revenue: float
    campaigns: int
    ctr: float
    conversion_rate: float
    roas: float
    avg_revenue_per_campaign: float
    revenue_share: float


@dataclass(frozen=True)
class DeviceBreakdown:
    revenue: float = 0
    spend: float = 0
    conversions: float = 0
    roas: float = 0


@dataclass(frozen=True)
class CampaignDeviceBreakdown:
    """Per-campaign device split used by the campaign breakdown table."""
    campaign_name: str
    campaign_id: str
    medium: str
    devices: Dict[str, DeviceBreakdown]


@dataclass(frozen=True)
class DeviceMetrics:
    devices: Tuple[DevicePerformance, ...]
    campaign_breakdown: Tuple[CampaignDeviceBreakdown, ...]
    total_revenue: float
    total_spend: float
    total_conversions: float
    total_clicks: float
    total_impressions: float
    mobile_share: float
    desktop_share: float
    tablet_share: float


@dataclass(frozen=True)
class RegionPerformance:
    region: str
    country: str
    impressions: float
    clicks: float
    conversions: float
    spend: float
    revenue: float
    value: float
    ctr: float
    conversion_rate: float
    roas: float
    cpc: float


@dataclass(frozen=True)
class RegionalMetrics:
    regions: Tuple[RegionPerformance, ...]
    top_regions_by_revenue: Tuple[RegionPerformance, ...]
    total_spend: float
    total_revenue: float
    total_impressions: float
    total_conversions: float
    total_clicks: float
    region_count: int
    selected_metric: RegionMetric
    country_conflicts: Dict[str, Tuple[str, ...]]


@dataclass(frozen=True)
class WeekPerformance:
    week_start: str
    label: str
    spend: float
    revenue: float
    impressions: float
    clicks: float


@dataclass(frozen=True)
class WeeklyMetrics:
    weeks: Tuple[WeekPerformance, ...]
    revenue_by_week: Tuple[SeriesPoint, ...]
    spend_by_week: Tuple[SeriesPoint, ...]
    total_spend: float
    total_revenue: float
    total_impressions: float
    total_clicks: float
    average_roas: float
    week_count: int


# ---------------------------------------------------------------------------
# View model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ViewState:
    """Explicit load state of a dashboard screen."""
    status: ViewStatus
    data: Optional[MarketingData] = None
    error_message: Optional[str] = None

    @classmethod
    def loading(cls) -> "ViewState":
        return cls(status=ViewStatus.LOADING)

    @classmethod
    def loaded(cls, data: MarketingData) -> "ViewState":
        return cls(status=ViewStatus.LOADED, data=data)

    @classmethod
    def failed(cls, message: str) -> "ViewState":
        return cls(status=ViewStatus.FAILED, error_message=message)

    @property
    def is_loaded(self) -> bool:
        return self.status is ViewStatus.LOADED

    @property
    def is_failed(self) -> bool:
        return self.status is ViewStatus.FAILED
