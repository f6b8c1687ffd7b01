"""GitHub connector: repository search sorted by stars."""

from __future__ import annotations

from typing import Any, List

from signalfeed.connectors.api import APIConnector
from signalfeed.models import DataSource, RawArticle


class GitHubConnector(APIConnector):
    source = DataSource.GITHUB
    id_prefix = "github"
    base_url = "https://api.github.com/search/repositories"

    async def _fetch(self, topic: str) -> List[RawArticle]:
        data = await self.request_json(
            self.url,
            params={"q": topic, "sort": "stars", "order": "desc", "per_page": self.limit},
            headers={"Accept": "application/vnd.github.v3+json"},
        )
        return self.normalize(data)

    def normalize(self, data: Any) -> List[RawArticle]:
        if not isinstance(data, dict):
            return []
        out: List[RawArticle] = []
        for repo in data.get("items") or []:
            name = repo.get("full_name") or repo.get("name")
            if not name:
                continue
            title = f"{name}: {repo.get('description') or repo.get('name') or name}"
            article = self.make_article(
                repo.get("id"), title, repo.get("html_url"), repo.get("created_at"),
                repo.get("stargazers_count"),
            )
            if article:
                out.append(article)
        return out
