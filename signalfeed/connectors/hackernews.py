"""Hacker News connector (Algolia search API)."""

from __future__ import annotations

from typing import Any, List

from signalfeed.connectors.api import APIConnector
from signalfeed.models import DataSource, RawArticle


class HackerNewsConnector(APIConnector):
    source = DataSource.HACKERNEWS
    id_prefix = "hn"
    base_url = "https://hn.algolia.com/api/v1/search"

    async def _fetch(self, topic: str) -> List[RawArticle]:
        hits_per_page = int(self.config.get("hits_per_page", self.limit))
        data = await self.request_json(self.url, params={"query": topic, "hitsPerPage": hits_per_page})
        return self.normalize(data)

    def normalize(self, data: Any) -> List[RawArticle]:
        if not isinstance(data, dict):
            return []
        out: List[RawArticle] = []
        for hit in data.get("hits") or []:
            # Ask HN / polls have no outbound url
            if not hit.get("title") or not hit.get("url"):
                continue
            article = self.make_article(
                hit.get("objectID"), hit["title"], hit["url"], hit.get("created_at"), hit.get("points"),
            )
            if article:
                out.append(article)
        return out
