"""Reddit connector: hot posts from a set of subreddits, filtered by topic."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from signalfeed.connectors.api import APIConnector
from signalfeed.connectors.base import matches_topic, topic_words
from signalfeed.models import DataSource, RawArticle

logger = logging.getLogger(__name__)

DEFAULT_SUBREDDITS = ["programming", "technology", "webdev", "MachineLearning", "computerscience"]
MIN_RELEVANT_POSTS = 3


class RedditConnector(APIConnector):
    source = DataSource.REDDIT
    id_prefix = "reddit"
    base_url = "https://www.reddit.com"

    def __init__(self, config: Dict[str, Any] | None = None) -> None:
        super().__init__(config)
        self.subreddits: List[str] = list(self.config.get("subreddits") or DEFAULT_SUBREDDITS)
        self.posts_per_subreddit = int(self.config.get("posts_per_subreddit", 5))

    async def _fetch(self, topic: str) -> List[RawArticle]:
        results = await asyncio.gather(
            *(self._fetch_subreddit(name) for name in self.subreddits),
            return_exceptions=True,
        )
        posts: List[Dict[str, Any]] = []
        for name, result in zip(self.subreddits, results):
            if isinstance(result, BaseException):
                logger.warning("Reddit r/%s failed: %s", name, result)
                continue
            posts.extend(result)
        if not posts:
            logger.warning("Reddit returned no posts; unauthenticated requests may be blocked")
            return []
        return self.normalize(posts, topic)

    async def _fetch_subreddit(self, name: str) -> List[Dict[str, Any]]:
        data = await self.request_json(
            f"{self.url}/r/{name}/hot.json",
            params={"limit": self.posts_per_subreddit},
            headers={"Accept": "application/json"},
        )
        if not isinstance(data, dict):
            return []
        children = (data.get("data") or {}).get("children") or []
        return [c["data"] for c in children if isinstance(c, dict) and c.get("data")]

    def normalize(self, posts: List[Dict[str, Any]], topic: str) -> List[RawArticle]:
        posts = [p for p in posts if p.get("title")]
        words = topic_words(topic, min_length=2)
        if words:
            relevant = [
                p for p in posts
                if matches_topic(f"{p['title']} {p.get('selftext') or ''}", words)
            ]
        else:
            relevant = posts
        # Thin topics still get something to rank
        chosen = relevant if len(relevant) >= MIN_RELEVANT_POSTS else posts[:10]

        out: List[RawArticle] = []
        seen: set[str] = set()
        for post in chosen:
            link = post.get("url") or ""
            if link.startswith("http") and "reddit.com" not in link:
                url = link
            else:
                url = f"https://reddit.com{post.get('permalink', '')}"
            created_utc = post.get("created_utc")
            created_at = (
                datetime.fromtimestamp(float(created_utc), tz=timezone.utc).isoformat()
                if created_utc is not None
                else None
            )
            article = self.make_article(post.get("id"), post["title"], url, created_at, post.get("score"))
            if article is None or article.id in seen:
                continue
            seen.add(article.id)
            out.append(article)
            if len(out) >= self.limit:
                break
        return out
