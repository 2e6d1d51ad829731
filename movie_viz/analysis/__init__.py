"""
In-memory transforms behind the charts.
"""
from .types import RatingSummary, BoxStats, Outlier, ReleaseSummary
from .aggregations import (
    DEFAULT_RATING_ORDER,
    rating_rank,
    summarize_by_rating,
    summarize_releases,
)
from .distribution import (
    LENGTH_CATEGORIES,
    length_category,
    categorize_runtimes,
    compute_box_stats,
    summarize_by_length,
)

__all__ = [
    "RatingSummary",
    "BoxStats",
    "Outlier",
    "ReleaseSummary",
    "DEFAULT_RATING_ORDER",
    "rating_rank",
    "summarize_by_rating",
    "summarize_releases",
    "LENGTH_CATEGORIES",
    "length_category",
    "categorize_runtimes",
    "compute_box_stats",
    "summarize_by_length",
]
