"""Base connector interface: fetch(topic) -> list[RawArticle], never raising."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Protocol

from signalfeed.models import DataSource, RawArticle
from signalfeed.validation import is_valid_url

logger = logging.getLogger(__name__)


class Connector(Protocol):
    """Anything the Aggregator can fan out to."""

    source: DataSource

    async def fetch(self, topic: str) -> List[RawArticle]:
        ...


def topic_words(topic: str, min_length: int = 0) -> List[str]:
    """Lowercased whitespace-separated words of the topic longer than ``min_length``."""
    return [w for w in re.split(r"\s+", topic.lower().strip()) if w and len(w) > min_length]


def matches_topic(text: str, words: List[str]) -> bool:
    """True when any topic word occurs in ``text`` (case-insensitive)."""
    lowered = text.lower()
    return any(w in lowered for w in words)


class BaseConnector(ABC):
    """Abstract base for source connectors.

    Subclasses set ``source`` and ``id_prefix`` and implement ``_fetch``.
    ``fetch`` is the boundary: any error raised by ``_fetch`` is logged and
    turned into an empty result.
    """

    source: DataSource
    id_prefix: str = ""

    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        self.config = config or {}
        self.source_id: str = self.config.get("id") or self.source.value
        self.limit: int = int(self.config.get("limit", 10))

    async def fetch(self, topic: str) -> List[RawArticle]:
        try:
            articles = await self._fetch(topic)
        except Exception as e:
            logger.warning("Source %s failed for %r: %s", self.source_id, topic, e)
            return []
        logger.info("Source %s: %d articles for %r", self.source_id, len(articles), topic)
        return articles

    @abstractmethod
    async def _fetch(self, topic: str) -> List[RawArticle]:
        ...

    def make_article(
        self,
        native_id: Any,
        title: Optional[str],
        url: Optional[str],
        created_at: Optional[str],
        points: Optional[int] = None,
    ) -> Optional[RawArticle]:
        """Build a RawArticle, or return None when the platform item is unusable."""
        title = (title or "").strip()
        if native_id in (None, "") or not title or not created_at:
            return None
        if not is_valid_url(url):
            logger.debug("Source %s: skipping %s with invalid url %r", self.source_id, native_id, url)
            return None
        if points is not None:
            try:
                points = int(points)
            except (TypeError, ValueError):
                points = None
        return RawArticle(
            id=f"{self.id_prefix or self.source.value}-{native_id}",
            title=title,
            url=url.strip(),
            created_at=str(created_at),
            source=self.source,
            points=points,
        )
