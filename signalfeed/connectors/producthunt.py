"""Product Hunt connector (GraphQL API, needs PRODUCT_HUNT_API_TOKEN)."""

from __future__ import annotations

from typing import Any, List

from signalfeed.connectors.api import APIConnector
from signalfeed.connectors.base import matches_topic, topic_words
from signalfeed.models import DataSource, RawArticle

POSTS_QUERY = """
query {
  posts(first: 10, order: VOTES) {
    edges {
      node { id name tagline url votesCount createdAt }
    }
  }
}
"""


class ProductHuntConnector(APIConnector):
    source = DataSource.PRODUCTHUNT
    id_prefix = "ph"
    base_url = "https://api.producthunt.com/v2/api/graphql"

    async def _fetch(self, topic: str) -> List[RawArticle]:
        data = await self.request_json(
            self.url,
            method="POST",
            json_body={"query": POSTS_QUERY},
            headers={"Accept": "application/json"},
        )
        return self.normalize(data, topic)

    def normalize(self, data: Any, topic: str) -> List[RawArticle]:
        if not isinstance(data, dict):
            return []
        edges = (((data.get("data") or {}).get("posts") or {}).get("edges")) or []
        words = topic_words(topic)
        out: List[RawArticle] = []
        for edge in edges:
            node = (edge or {}).get("node") or {}
            name, tagline = node.get("name") or "", node.get("tagline") or ""
            if not name or not matches_topic(f"{name} {tagline}", words):
                continue
            article = self.make_article(
                node.get("id"), f"{name} - {tagline}", node.get("url"), node.get("createdAt"),
                node.get("votesCount"),
            )
            if article:
                out.append(article)
        return out
