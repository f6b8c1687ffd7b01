"""Concurrent fan-out to every registered connector with partial-failure tolerance.

Every connector is awaited jointly; each call settles into a tagged
SourceResult (articles or error) so one failing platform never skips the
join. Results are concatenated in registration order, not completion order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from signalfeed.connectors.base import Connector
from signalfeed.models import RawArticle

logger = logging.getLogger(__name__)


@dataclass
class SourceResult:
    """Outcome of one connector call."""

    source_id: str
    articles: List[RawArticle] = field(default_factory=list)
    error_message: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.error_message is None


@dataclass
class AggregationSummary:
    """All connector outcomes for one topic, in registration order."""

    topic: str
    results: List[SourceResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def articles(self) -> List[RawArticle]:
        out: List[RawArticle] = []
        for r in self.results:
            if r.success:
                out.extend(r.articles)
        return out

    @property
    def total_errors(self) -> int:
        return sum(1 for r in self.results if not r.success)


class Aggregator:
    """Fan a topic out to every connector and merge what comes back.

    Usage:
        aggregator = Aggregator(build_connectors(config))
        articles = await aggregator.aggregate("react performance")
    """

    def __init__(
        self,
        connectors: Sequence[Connector],
        request_timeout: Optional[float] = None,
    ) -> None:
        self.connectors = list(connectors)
        self.request_timeout = request_timeout

    async def aggregate(self, topic: str) -> List[RawArticle]:
        """Concatenated articles from every connector that succeeded. Empty is a valid outcome."""
        summary = await self.collect(topic)
        return summary.articles

    async def collect(self, topic: str) -> AggregationSummary:
        summary = AggregationSummary(topic=topic)
        t0 = time.monotonic()
        summary.results = list(
            await asyncio.gather(*(self._fetch_one(c, topic) for c in self.connectors))
        )
        summary.duration_seconds = time.monotonic() - t0
        logger.info(
            "Aggregator: %d articles from %d sources (%d failed) for %r in %.1fs",
            len(summary.articles),
            len(summary.results),
            summary.total_errors,
            topic,
            summary.duration_seconds,
        )
        return summary

    async def _fetch_one(self, connector: Connector, topic: str) -> SourceResult:
        source_id = getattr(connector, "source_id", None) or connector.source.value
        result = SourceResult(source_id=source_id)
        t0 = time.monotonic()
        try:
            if self.request_timeout:
                articles = await asyncio.wait_for(connector.fetch(topic), timeout=self.request_timeout)
            else:
                articles = await connector.fetch(topic)
            result.articles = list(articles or [])
        except asyncio.TimeoutError:
            result.error_message = f"timed out after {self.request_timeout}s"
            logger.error("Source %s %s", source_id, result.error_message)
        except Exception as e:
            result.error_message = str(e) or type(e).__name__
            logger.error("Source %s failed: %s", source_id, result.error_message)
        result.duration_seconds = time.monotonic() - t0
        return result
