"""Recency, popularity and composite scoring with an explainable breakdown."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from dateutil.parser import parse as dateparse

from signalfeed.models import FeedItem, RawArticle

logger = logging.getLogger(__name__)

W_RELEVANCE = 0.6
W_RECENCY = 0.25
W_POPULARITY = 0.15

POPULARITY_CAP = 100
POPULARITY_FLOOR = 0.1

# Upper age bound (inclusive) -> score. Older than the last bound scores RECENCY_FLOOR.
RECENCY_BUCKETS: list[tuple[timedelta, float]] = [
    (timedelta(days=1), 1.0),
    (timedelta(days=7), 0.8),
    (timedelta(days=30), 0.5),
    (timedelta(days=180), 0.3),
]
RECENCY_FLOOR = 0.1


def _parse_created_at(created_at: str | datetime) -> datetime:
    dt = created_at if isinstance(created_at, datetime) else dateparse(str(created_at))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def score_recency(created_at: str | datetime, now: Optional[datetime] = None) -> float:
    """Step function of article age; each bucket includes its upper bound.

    Future timestamps count as brand new; unparseable ones as the oldest bucket.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    try:
        age = now - _parse_created_at(created_at)
    except (ValueError, TypeError, OverflowError):
        return RECENCY_FLOOR
    for bound, value in RECENCY_BUCKETS:
        if age <= bound:
            return value
    return RECENCY_FLOOR


def score_popularity(points: Optional[int]) -> float:
    """Capped linear normalization onto [0, 1]; missing or non-positive points get a small floor."""
    if points is None or points <= 0:
        return POPULARITY_FLOOR
    return min(points, POPULARITY_CAP) / POPULARITY_CAP


def composite_score(relevance: float, recency: float, popularity: float) -> float:
    return W_RELEVANCE * relevance + W_RECENCY * recency + W_POPULARITY * popularity


def explain(relevance: float, recency: float, popularity: float) -> str:
    return (
        f"Relevance: {relevance * 100:.0f}% | "
        f"Recency: {recency * 100:.0f}% | "
        f"Popularity: {popularity * 100:.0f}%"
    )


def fallback_summary(article: RawArticle) -> str:
    return f'Article about "{article.title}" from {article.source.value}'


def rank(
    candidates: Sequence[RawArticle],
    relevance: Sequence[float],
    recency: Sequence[float],
    popularity: Sequence[float],
    summaries: Optional[Sequence[str]] = None,
) -> list[FeedItem]:
    """Combine the sub-scores into FeedItems sorted by score, highest first.

    The sort is stable: items with equal scores keep their candidate order.
    """
    n = len(candidates)
    if not (len(relevance) == len(recency) == len(popularity) == n):
        raise ValueError("Score lists must match the number of candidates")
    if summaries is not None and len(summaries) != n:
        raise ValueError("Summary list must match the number of candidates")

    items: list[FeedItem] = []
    for i, article in enumerate(candidates):
        rel, rec, pop = relevance[i], recency[i], popularity[i]
        summary = summaries[i] if summaries is not None and summaries[i] else fallback_summary(article)
        items.append(
            FeedItem(
                id=article.id,
                title=article.title,
                url=article.url,
                created_at=article.created_at,
                source=article.source,
                summary=summary,
                score=composite_score(rel, rec, pop),
                relevance_score=rel,
                recency_score=rec,
                popularity_score=pop,
                explanation=explain(rel, rec, pop),
            )
        )
    return sorted(items, key=lambda it: it.score, reverse=True)
