"""Ranking pipeline: aggregation, relevance, recency/popularity and composite scoring."""

from signalfeed.ranking.aggregator import AggregationSummary, Aggregator, SourceResult
from signalfeed.ranking.relevance import RelevanceScorer, cosine_similarity
from signalfeed.ranking.scorer import (
    composite_score,
    explain,
    rank,
    score_popularity,
    score_recency,
)

__all__ = [
    "AggregationSummary",
    "Aggregator",
    "SourceResult",
    "RelevanceScorer",
    "cosine_similarity",
    "composite_score",
    "explain",
    "rank",
    "score_popularity",
    "score_recency",
]
