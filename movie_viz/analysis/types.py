"""
Value types produced by the chart transforms.

All of them live for a single render pass and are serialized with
``to_dict()`` for the JSON API.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _num(value: Optional[float]) -> Optional[float]:
    """NaN is not valid JSON; map it to None."""
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


@dataclass(frozen=True)
class RatingSummary:
    """Average score and vote total for one age rating."""
    rating: str
    avg_score: float
    total_votes: float
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rating": self.rating,
            "avg_score": _num(self.avg_score),
            "total_votes": _num(self.total_votes),
            "count": self.count,
        }


@dataclass(frozen=True)
class Outlier:
    """A single score outside the box plot fences."""
    score: float
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"score": _num(self.score), "title": self.title}


@dataclass(frozen=True)
class BoxStats:
    """Five-number summary plus fences and outliers for one category."""
    category: str
    count: int
    min: float
    q1: float
    median: float
    q3: float
    max: float
    mean: float
    stdev: Optional[float]
    outliers: List[Outlier] = field(default_factory=list)

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    @property
    def lower_fence(self) -> float:
        return self.q1 - 1.5 * self.iqr

    @property
    def upper_fence(self) -> float:
        return self.q3 + 1.5 * self.iqr

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "count": self.count,
            "min": self.min,
            "q1": self.q1,
            "median": self.median,
            "q3": self.q3,
            "max": self.max,
            "iqr": self.iqr,
            "lower_fence": self.lower_fence,
            "upper_fence": self.upper_fence,
            "mean": self.mean,
            "stdev": _num(self.stdev),
            "outliers": [o.to_dict() for o in self.outliers],
        }


@dataclass(frozen=True)
class ReleaseSummary:
    """Release count and average rating for one (year, type) pair."""
    release_year: int
    type: str
    num_releases: int
    avg_rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "release_year": self.release_year,
            "type": self.type,
            "num_releases": self.num_releases,
            "avg_rating": _num(self.avg_rating),
        }
