"""Tests for aggregation, relevance, recency/popularity and composite ranking."""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from signalfeed.models import DataSource, RawArticle
from signalfeed.ranking.aggregator import Aggregator
from signalfeed.ranking.relevance import RelevanceScorer, cosine_similarity
from signalfeed.ranking.scorer import (
    composite_score,
    explain,
    rank,
    score_popularity,
    score_recency,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_article(i: int, title: str = "", source: DataSource = DataSource.HACKERNEWS, points=None) -> RawArticle:
    return RawArticle(
        id=f"{source.value}-{i}",
        title=title or f"Article {i}",
        url=f"https://example.com/{source.value}/{i}",
        created_at=NOW.isoformat(),
        source=source,
        points=points,
    )


class StubConnector:
    """Connector returning fixed articles after an optional delay."""

    def __init__(self, source: DataSource, articles: List[RawArticle], delay: float = 0.0):
        self.source = source
        self.source_id = source.value
        self._articles = articles
        self._delay = delay

    async def fetch(self, topic: str) -> List[RawArticle]:
        await asyncio.sleep(self._delay)
        return self._articles


class FailingConnector:
    source = DataSource.REDDIT
    source_id = "reddit"

    async def fetch(self, topic: str) -> List[RawArticle]:
        raise ConnectionError("Simulated network failure")


class FakeEmbedder:
    def __init__(self, topic_vec, vectors=None, fail_topic=False, fail_batch=False):
        self.topic_vec = topic_vec
        self.vectors = vectors
        self.fail_topic = fail_topic
        self.fail_batch = fail_batch
        self.batch_calls = 0

    async def embed_one(self, text):
        if self.fail_topic:
            raise RuntimeError("quota exceeded")
        return self.topic_vec

    async def embed_batch(self, texts):
        self.batch_calls += 1
        if self.fail_batch:
            raise RuntimeError("quota exceeded")
        return self.vectors


# --- Aggregator ---

class TestAggregator:
    @pytest.mark.asyncio
    async def test_partial_failure_keeps_registration_order(self):
        a_items = [make_article(1, source=DataSource.HACKERNEWS), make_article(2, source=DataSource.HACKERNEWS)]
        c_items = [make_article(3, source=DataSource.DEVTO)]
        aggregator = Aggregator([
            # A finishes last but still comes first
            StubConnector(DataSource.HACKERNEWS, a_items, delay=0.05),
            FailingConnector(),
            StubConnector(DataSource.DEVTO, c_items),
        ])
        articles = await aggregator.aggregate("anything")
        assert [a.id for a in articles] == ["hackernews-1", "hackernews-2", "devto-3"]

    @pytest.mark.asyncio
    async def test_collect_reports_tagged_outcomes(self):
        aggregator = Aggregator([FailingConnector(), StubConnector(DataSource.DEVTO, [make_article(1)])])
        summary = await aggregator.collect("x")
        assert [r.success for r in summary.results] == [False, True]
        assert "Simulated network failure" in summary.results[0].error_message
        assert summary.total_errors == 1

    @pytest.mark.asyncio
    async def test_all_failing_is_empty_not_error(self):
        aggregator = Aggregator([FailingConnector(), StubConnector(DataSource.DEVTO, [])])
        assert await aggregator.aggregate("x") == []

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        slow = StubConnector(DataSource.HACKERNEWS, [make_article(1)], delay=1.0)
        fast = StubConnector(DataSource.DEVTO, [make_article(2, source=DataSource.DEVTO)])
        aggregator = Aggregator([slow, fast], request_timeout=0.05)
        summary = await aggregator.collect("x")
        assert not summary.results[0].success
        assert [a.id for a in summary.articles] == ["devto-2"]


# --- Cosine similarity & relevance ---

class TestCosineSimilarity:
    def test_identical_and_orthogonal(self):
        assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)

    def test_symmetric_and_bounded(self):
        a, b = [0.3, -1.2, 4.0], [2.0, 0.5, -0.7]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
        assert -1.0 <= cosine_similarity(a, b) <= 1.0

    def test_zero_and_empty_vectors(self):
        assert cosine_similarity([0, 0], [1, 1]) == 0.0
        assert cosine_similarity([], [1, 1]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1, 2], [1, 2, 3])


class TestRelevanceScorer:
    @pytest.mark.asyncio
    async def test_scores_each_candidate_with_one_batch_call(self):
        embedder = FakeEmbedder([1.0, 0.0], [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        scores = await RelevanceScorer(embedder).score("t", [make_article(i) for i in range(3)])
        assert scores == pytest.approx([1.0, 0.0, 1 / math.sqrt(2)])
        assert embedder.batch_calls == 1

    @pytest.mark.asyncio
    async def test_topic_failure_degrades_to_zero(self):
        embedder = FakeEmbedder([1.0], fail_topic=True)
        assert await RelevanceScorer(embedder).score("t", [make_article(1), make_article(2)]) == [0.0, 0.0]
        assert embedder.batch_calls == 0

    @pytest.mark.asyncio
    async def test_batch_failure_degrades_to_zero(self):
        embedder = FakeEmbedder([1.0], fail_batch=True)
        assert await RelevanceScorer(embedder).score("t", [make_article(1)]) == [0.0]

    @pytest.mark.asyncio
    async def test_mismatched_vectors_degrade_individually(self):
        embedder = FakeEmbedder([1.0, 0.0], [[1.0, 0.0], [1.0, 0.0, 0.0], [-1.0, 0.0]])
        scores = await RelevanceScorer(embedder).score("t", [make_article(i) for i in range(3)])
        assert scores == [pytest.approx(1.0), 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_empty_candidates(self):
        assert await RelevanceScorer(FakeEmbedder([1.0])).score("t", []) == []


# --- Recency / popularity ---

class TestRecency:
    @pytest.mark.parametrize(
        "age, expected",
        [
            (timedelta(hours=1), 1.0),
            (timedelta(days=1), 1.0),
            (timedelta(days=1, seconds=1), 0.8),
            (timedelta(days=7), 0.8),
            (timedelta(days=7, seconds=1), 0.5),
            (timedelta(days=30), 0.5),
            (timedelta(days=30, seconds=1), 0.3),
            (timedelta(days=180), 0.3),
            (timedelta(days=180, seconds=1), 0.1),
            (timedelta(days=3650), 0.1),
        ],
    )
    def test_buckets_include_upper_bound(self, age, expected):
        assert score_recency((NOW - age).isoformat(), NOW) == expected

    def test_non_increasing_with_age(self):
        ages = [timedelta(hours=h) for h in range(0, 24 * 400, 7)]
        scores = [score_recency(NOW - a, NOW) for a in ages]
        assert all(x >= y for x, y in zip(scores, scores[1:]))

    def test_naive_timestamps_are_utc_and_future_is_fresh(self):
        assert score_recency("2025-06-01T00:00:00", NOW) == 1.0
        assert score_recency((NOW + timedelta(days=3)).isoformat(), NOW) == 1.0

    def test_unparseable_timestamp_scores_as_oldest(self):
        assert score_recency("not a date", NOW) == 0.1


class TestPopularity:
    @pytest.mark.parametrize("points", [None, 0, -5])
    def test_floor(self, points):
        assert score_popularity(points) == 0.1

    def test_linear_and_capped(self):
        assert score_popularity(50) == 0.5
        assert score_popularity(100) == 1.0
        assert score_popularity(1000) == 1.0


# --- Composite ranking ---

class TestRank:
    def test_composite_weights(self):
        for rel, rec, pop in [(0.72, 0.8, 0.1), (0.0, 1.0, 1.0), (1.0, 0.1, 0.1)]:
            assert composite_score(rel, rec, pop) == pytest.approx(0.6 * rel + 0.25 * rec + 0.15 * pop)

    def test_explanation_format(self):
        assert explain(0.72, 0.8, 0.1) == "Relevance: 72% | Recency: 80% | Popularity: 10%"

    def test_sorted_descending_with_score_invariant(self):
        articles = [make_article(i) for i in range(3)]
        items = rank(articles, [0.1, 0.9, 0.5], [1.0, 0.8, 0.5], [0.1, 0.5, 1.0], ["s0", "s1", "s2"])
        assert [it.id for it in items] == ["hackernews-1", "hackernews-2", "hackernews-0"]
        for it in items:
            assert it.score == pytest.approx(
                0.6 * it.relevance_score + 0.25 * it.recency_score + 0.15 * it.popularity_score
            )
        assert items[0].summary == "s1"

    def test_equal_scores_keep_input_order(self):
        articles = [make_article(i) for i in range(4)]
        items = rank(articles, [0.5] * 4, [0.5] * 4, [0.5] * 4)
        assert [it.id for it in items] == [a.id for a in articles]

    def test_missing_summary_uses_fallback(self):
        article = make_article(1, title="Fast React", source=DataSource.DEVTO)
        [item] = rank([article], [0.0], [1.0], [0.1], [""])
        assert item.summary == 'Article about "Fast React" from devto'

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            rank([make_article(1)], [0.1, 0.2], [0.1], [0.1])
