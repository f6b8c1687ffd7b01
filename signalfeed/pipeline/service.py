"""Feed ranking engine: admission -> dedup -> aggregate -> score/summarize -> rank."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from signalfeed.connectors.factory import build_connectors
from signalfeed.errors import RateLimitExceeded
from signalfeed.guards.dedup import RequestDeduplicator, make_request_key
from signalfeed.guards.rate_limiter import UNKNOWN_CLIENT, RateLimiter
from signalfeed.models import FeedItem
from signalfeed.providers.embedder import Embedder
from signalfeed.providers.summarizer import SummarizerAdapter
from signalfeed.ranking.aggregator import Aggregator
from signalfeed.ranking.relevance import RelevanceScorer
from signalfeed.ranking.scorer import rank, score_popularity, score_recency

logger = logging.getLogger(__name__)

OPERATION = "getRankedFeed"


class FeedService:
    """Entry point of the engine.

    The deduplicator and rate limiter are process-scoped state objects passed
    in by whoever owns the process lifecycle (the server or the CLI); either
    may be omitted.

    Usage:
        service = FeedService.from_config(load_config())
        items = await service.get_ranked_feed("react performance", identifier="203.0.113.7")
    """

    def __init__(
        self,
        aggregator: Aggregator,
        relevance: RelevanceScorer,
        summarizer: SummarizerAdapter,
        deduplicator: Optional[RequestDeduplicator] = None,
        rate_limiter: Optional[RateLimiter] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.aggregator = aggregator
        self.relevance = relevance
        self.summarizer = summarizer
        self.deduplicator = deduplicator
        self.rate_limiter = rate_limiter
        self._now = now

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        deduplicator: Optional[RequestDeduplicator] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> "FeedService":
        timeout = config.get("aggregation", {}).get("request_timeout_seconds")
        return cls(
            aggregator=Aggregator(build_connectors(config), request_timeout=timeout),
            relevance=RelevanceScorer(Embedder(config)),
            summarizer=SummarizerAdapter(config),
            deduplicator=deduplicator,
            rate_limiter=rate_limiter,
        )

    async def get_ranked_feed(self, topic: str, identifier: str = UNKNOWN_CLIENT) -> list[FeedItem]:
        """Ranked, explained articles for ``topic``.

        Raises RateLimitExceeded when admission is denied. Source, embedding
        and summarization failures never raise; an empty list is a valid answer.
        """
        if self.rate_limiter is not None:
            admission = self.rate_limiter.check(identifier)
            if not admission.allowed:
                raise RateLimitExceeded(
                    identifier=identifier,
                    reset_at=admission.reset_at,
                    retry_after_seconds=admission.retry_after_seconds(self.rate_limiter.clock()),
                )

        if self.deduplicator is None:
            return await self._build_feed(topic)
        key = make_request_key(OPERATION, {"topic": topic})
        return await self.deduplicator.execute(key, lambda: self._build_feed(topic))

    async def _build_feed(self, topic: str) -> list[FeedItem]:
        articles = await self.aggregator.aggregate(topic)
        if not articles:
            logger.info("FeedService: no articles for %r", topic)
            return []

        relevance, summaries = await asyncio.gather(
            self.relevance.score(topic, articles),
            self.summarizer.summarize(topic, articles),
        )
        now = self._now()
        recency = [score_recency(a.created_at, now) for a in articles]
        popularity = [score_popularity(a.points) for a in articles]

        items = rank(articles, relevance, recency, popularity, summaries)
        logger.info(
            "FeedService: ranked %d articles for %r (top score %.3f)",
            len(items), topic, items[0].score,
        )
        return items


def build_guards(config: dict[str, Any]) -> tuple[RequestDeduplicator, RateLimiter]:
    """Process-scoped deduplicator and rate limiter from the ``dedup`` / ``rate_limit`` sections."""
    dedup = config.get("dedup", {})
    limits = config.get("rate_limit", {})
    deduplicator = RequestDeduplicator(max_age_seconds=float(dedup.get("max_age_seconds", 30)))
    rate_limiter = RateLimiter(
        window_seconds=float(limits.get("window_seconds", 60)),
        max_requests=int(limits.get("max_requests", 10)),
        cleanup_interval_seconds=float(limits.get("cleanup_interval_seconds", 60)),
    )
    return deduplicator, rate_limiter
