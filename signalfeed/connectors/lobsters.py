"""Lobsters connector: hottest stories filtered by topic words."""

from __future__ import annotations

from typing import Any, Dict, List

from signalfeed.connectors.api import APIConnector
from signalfeed.connectors.base import matches_topic, topic_words
from signalfeed.models import DataSource, RawArticle


def _engagement(story: Dict[str, Any]) -> int:
    return int(story.get("score") or 0) + int(story.get("comment_count") or 0)


class LobstersConnector(APIConnector):
    source = DataSource.LOBSTERS
    id_prefix = "lobsters"
    base_url = "https://lobste.rs/hottest.json"

    async def _fetch(self, topic: str) -> List[RawArticle]:
        data = await self.request_json(self.url)
        if not isinstance(data, list):
            return []
        return self.normalize(data, topic)

    def normalize(self, stories: List[Dict[str, Any]], topic: str) -> List[RawArticle]:
        words = topic_words(topic)
        matching = [
            s for s in stories
            if s.get("title")
            and matches_topic(f"{s['title']} {' '.join(s.get('tags') or [])}", words)
        ]
        matching.sort(key=_engagement, reverse=True)

        out: List[RawArticle] = []
        for s in matching[: self.limit]:
            short_id = s.get("short_id")
            url = s.get("url") or f"https://lobste.rs/s/{short_id}"
            article = self.make_article(short_id, s["title"], url, s.get("created_at"), _engagement(s))
            if article:
                out.append(article)
        return out
