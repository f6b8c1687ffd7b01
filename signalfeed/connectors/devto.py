"""Dev.to connector: tag search with a filtered top-articles fallback."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from signalfeed.connectors.api import APIConnector
from signalfeed.connectors.base import matches_topic, topic_words
from signalfeed.models import DataSource, RawArticle

logger = logging.getLogger(__name__)


def absolute_devto_url(url: str) -> str:
    if url.startswith("http"):
        return url
    if url.startswith("/"):
        return f"https://dev.to{url}"
    return f"https://dev.to/{url}"


class DevToConnector(APIConnector):
    source = DataSource.DEVTO
    id_prefix = "devto"
    base_url = "https://dev.to/api/articles"

    async def _fetch(self, topic: str) -> List[RawArticle]:
        tagged = await self.request_json(self.url, params={"tag": topic, "per_page": 10, "top": 7})
        if isinstance(tagged, list) and tagged:
            return self.normalize(tagged)

        logger.debug("Dev.to tag search empty for %r, falling back to top articles", topic)
        top = await self.request_json(self.url, params={"per_page": 20, "top": 7})
        if not isinstance(top, list):
            return []
        return self.normalize(self.filter_by_topic(top, topic))

    @staticmethod
    def filter_by_topic(articles: List[Dict[str, Any]], topic: str) -> List[Dict[str, Any]]:
        words = topic_words(topic, min_length=2)
        if not words:
            return articles
        return [
            a for a in articles
            if matches_topic(a.get("title") or "", words)
            or any(matches_topic(tag, words) for tag in a.get("tag_list") or [])
        ]

    def normalize(self, articles: List[Dict[str, Any]]) -> List[RawArticle]:
        out: List[RawArticle] = []
        for a in articles[: self.limit]:
            url = a.get("url")
            if not url:
                continue
            points = a.get("positive_reactions_count") or a.get("public_reactions_count")
            article = self.make_article(
                a.get("id"), a.get("title"), absolute_devto_url(url), a.get("published_at"), points,
            )
            if article:
                out.append(article)
        return out
