"""
Zero-guarded ratio helpers and ordering tables shared by the aggregators.
"""

import math
from typing import Dict, Iterable, List, TypeVar, Callable

from models.data_models import AGE_GROUP_ORDER, UNRANKED_AGE_GROUP

T = TypeVar("T")

_AGE_GROUP_RANK: Dict[str, int] = {label: rank for rank, label in enumerate(AGE_GROUP_ORDER, start=1)}


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 for a zero or negative denominator or a non-finite result."""
    if not denominator > 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def ctr(clicks: float, impressions: float) -> float:
    """Click-through rate as a percentage."""
    return safe_divide(clicks, impressions) * 100


def conversion_rate(conversions: float, clicks: float) -> float:
    """Conversions per click as a percentage."""
    return safe_divide(conversions, clicks) * 100


def roas(revenue: float, spend: float) -> float:
    return safe_divide(revenue, spend)


def cpc(spend: float, clicks: float) -> float:
    return safe_divide(spend, clicks)


def share(part: float, total: float) -> float:
    """Percentage of total contributed by part."""
    return safe_divide(part, total) * 100


def age_group_rank(age_group: str) -> int:
    """Display rank for an age-group label; unknown labels sort last."""
    return _AGE_GROUP_RANK.get(age_group, UNRANKED_AGE_GROUP)


def sort_by_age_group(items: Iterable[T], key: Callable[[T], str]) -> List[T]:
    # sorted() is stable, so unknown labels keep their encounter order
    return sorted(items, key=lambda item: age_group_rank(key(item)))
