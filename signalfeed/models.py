"""Data models shared by connectors, scorers and the query layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DataSource(str, Enum):
    """Closed set of connector identifiers."""

    HACKERNEWS = "hackernews"
    REDDIT = "reddit"
    DEVTO = "devto"
    GITHUB = "github"
    LOBSTERS = "lobsters"
    PRODUCTHUNT = "producthunt"


@dataclass(frozen=True)
class RawArticle:
    """A candidate article normalized by a connector.

    ``id`` is prefixed by source (``hn-123``, ``reddit-abc``) so IDs never
    collide across connectors. ``created_at`` is an ISO-8601 string as the
    platform reported it.
    """

    id: str
    title: str
    url: str
    created_at: str
    source: DataSource
    points: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "createdAt": self.created_at,
            "points": self.points,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class FeedItem:
    """A ranked article with its score breakdown and summary."""

    id: str
    title: str
    url: str
    created_at: str
    source: DataSource
    summary: str
    score: float
    relevance_score: float
    recency_score: float
    popularity_score: float
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "createdAt": self.created_at,
            "source": self.source.value,
            "summary": self.summary,
            "score": round(self.score, 4),
            "relevanceScore": round(self.relevance_score, 4),
            "recencyScore": round(self.recency_score, 4),
            "popularityScore": round(self.popularity_score, 4),
            "explanation": self.explanation,
        }
