"""
Group-by summaries behind the bar chart and the bubble scatter.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .types import RatingSummary, ReleaseSummary

logger = logging.getLogger(__name__)


DEFAULT_RATING_ORDER = [
    "TV-Y", "TV-Y7", "TV-G", "G", "TV-PG", "PG",
    "TV-14", "PG-13", "TV-MA", "R", "NC-17", "NR",
]


def rating_rank(rating: str, rating_order: Sequence[str]) -> int:
    """Position of a rating in the maturity order; unknown ratings rank -1."""
    try:
        return list(rating_order).index(rating)
    except ValueError:
        return -1


def _numeric(df: pd.DataFrame, column: str) -> pd.Series:
    """Column coerced to numbers; an absent column is all NaN."""
    if column not in df.columns:
        return pd.Series(np.nan, index=df.index, dtype=float)
    return pd.to_numeric(df[column], errors="coerce")


def summarize_by_rating(
    df: pd.DataFrame,
    rating_order: Optional[Sequence[str]] = None,
) -> List[RatingSummary]:
    """
    Average IMDb score and total IMDb votes per age rating.

    Scores and votes that do not parse as numbers are ignored by the mean
    and the sum. Rows are ordered by increasing maturity; ratings missing
    from ``rating_order`` come first, in order of first appearance.

    Args:
        df: Rows with ``rating``, ``imdb_score`` and ``imdb_votes``
        rating_order: Maturity order of the ratings

    Returns:
        One RatingSummary per rating
    """
    rating_order = list(rating_order or DEFAULT_RATING_ORDER)

    data = df.copy()
    data["imdb_votes"] = _numeric(data, "imdb_votes")
    data["imdb_score"] = _numeric(data, "imdb_score")

    unrated = int(data["rating"].isna().sum())
    if unrated:
        logger.warning(f"Skipping {unrated} rows without a rating")
        data = data.dropna(subset=["rating"])
    data["rating"] = data["rating"].astype(str)

    grouped = (
        data.groupby("rating", sort=False)
        .agg(
            avg_score=("imdb_score", "mean"),
            total_votes=("imdb_votes", "sum"),
            rows=("rating", "size"),
        )
        .reset_index()
    )

    summaries = [
        RatingSummary(
            rating=row.rating,
            avg_score=float(row.avg_score),
            total_votes=float(row.total_votes),
            count=int(row.rows),
        )
        for row in grouped.itertuples(index=False)
    ]
    # sorted() is stable, so unknown ratings keep their first-appearance order
    return sorted(summaries, key=lambda s: rating_rank(s.rating, rating_order))


def summarize_releases(df: pd.DataFrame) -> List[ReleaseSummary]:
    """
    Number of releases and average IMDb score per release year and type.

    Every row counts as a release; the average ignores scores that do not
    parse as numbers. Rows without a year or a type are skipped.
    """
    data = df.copy()
    data["imdb_score"] = _numeric(data, "imdb_score")
    data["release_year"] = pd.to_numeric(data["release_year"], errors="coerce")

    incomplete = data["release_year"].isna() | data["type"].isna()
    if incomplete.any():
        logger.warning(f"Skipping {int(incomplete.sum())} rows without release_year/type")
        data = data[~incomplete]

    grouped = (
        data.groupby(["release_year", "type"], sort=True)
        .agg(
            num_releases=("type", "size"),
            avg_rating=("imdb_score", "mean"),
        )
        .reset_index()
    )

    return [
        ReleaseSummary(
            release_year=int(row.release_year),
            type=str(row.type),
            num_releases=int(row.num_releases),
            avg_rating=float(row.avg_rating),
        )
        for row in grouped.itertuples(index=False)
    ]
