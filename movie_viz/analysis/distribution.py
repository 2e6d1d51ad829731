"""
Box plot statistics of IMDb scores by media length category.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..utils.validation import DataValidator
from .types import BoxStats, Outlier

logger = logging.getLogger(__name__)


LENGTH_CATEGORIES = ["Short", "Medium", "Long"]

# Whisker fences sit this many IQRs beyond Q1 and Q3
IQR_FENCE_FACTOR = 1.5


def length_category(runtime: float, short_max: float = 90, medium_max: float = 150) -> str:
    """Bucket a runtime in minutes: <= short_max Short, <= medium_max Medium, else Long."""
    runtime = float(runtime)
    if runtime <= short_max:
        return "Short"
    elif runtime <= medium_max:
        return "Medium"
    else:
        return "Long"


def compute_box_stats(
    category: str,
    scores: Sequence[float],
    titles: Optional[Sequence[Optional[str]]] = None,
) -> BoxStats:
    """
    Quartiles, fences and outliers of one group of scores.

    Quartiles use linear interpolation between closest ranks at position
    ``(n - 1) * p`` of the sorted scores. Outliers are the scores strictly
    below ``Q1 - 1.5 * IQR`` or above ``Q3 + 1.5 * IQR``.

    Args:
        category: Group label
        scores: Numeric scores (NaN is not allowed)
        titles: Optional titles aligned with ``scores``, kept on outliers

    Returns:
        BoxStats for the group
    """
    values = np.asarray(scores, dtype=float)
    if values.size == 0:
        raise ValueError(f"No scores for category {category}")
    if np.isnan(values).any():
        raise ValueError(f"NaN score in category {category}")

    q1, median, q3 = np.quantile(values, [0.25, 0.5, 0.75], method="linear")
    iqr = q3 - q1
    lower = q1 - IQR_FENCE_FACTOR * iqr
    upper = q3 + IQR_FENCE_FACTOR * iqr

    if titles is None:
        titles = [None] * len(values)
    outliers = [
        Outlier(score=float(score), title=title)
        for score, title in zip(values, titles)
        if score < lower or score > upper
    ]

    return BoxStats(
        category=category,
        count=int(values.size),
        min=float(values.min()),
        q1=float(q1),
        median=float(median),
        q3=float(q3),
        max=float(values.max()),
        mean=float(values.mean()),
        stdev=float(values.std(ddof=1)) if values.size > 1 else None,
        outliers=outliers,
    )


def categorize_runtimes(
    runtimes: pd.Series,
    short_max: float = 90,
    medium_max: float = 150,
) -> pd.Series:
    """Vectorized length_category; NaN runtimes stay NaN."""
    return pd.cut(
        runtimes,
        bins=[-np.inf, short_max, medium_max, np.inf],
        labels=LENGTH_CATEGORIES,
        right=True,
    )


def summarize_by_length(
    df: pd.DataFrame,
    short_max: float = 90,
    medium_max: float = 150,
    name: str = "merged_data.json",
) -> List[BoxStats]:
    """
    Box plot statistics of IMDb scores per length category.

    Rendering is aborted (DataValidationError) when the dataset, or its
    first record, lacks ``runtime`` or ``imdb_score``.

    Returns:
        BoxStats in Short, Medium, Long order; empty categories are omitted
    """
    DataValidator().validate_first_record(df, ["runtime", "imdb_score"], name).raise_if_invalid(name)

    data = pd.DataFrame({
        "runtime": pd.to_numeric(df["runtime"], errors="coerce"),
        "imdb_score": pd.to_numeric(df["imdb_score"], errors="coerce"),
        "title": df["title"] if "title" in df.columns else None,
    })
    unusable = data["runtime"].isna() | data["imdb_score"].isna()
    if unusable.any():
        logger.warning(f"Skipping {int(unusable.sum())} records without numeric runtime/imdb_score")
        data = data[~unusable]

    data["length_category"] = categorize_runtimes(data["runtime"], short_max, medium_max)

    stats = []
    for category in LENGTH_CATEGORIES:
        group = data[data["length_category"] == category]
        if group.empty:
            logger.debug(f"No records in length category {category}")
            continue
        titles = [None if pd.isna(t) else str(t) for t in group["title"]]
        stats.append(compute_box_stats(category, group["imdb_score"].tolist(), titles))
    return stats
