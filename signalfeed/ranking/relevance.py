"""Embedding-based relevance: cosine similarity between topic and article titles."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import numpy as np

from signalfeed.models import RawArticle

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    async def embed_one(self, text: str) -> list[float]:
        ...

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        ...


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0.0 when either vector is empty or has zero norm.

    Raises ValueError for vectors of different lengths.
    """
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.size == 0 or vb.size == 0:
        return 0.0
    if va.shape != vb.shape:
        raise ValueError(f"Embedding vectors must have the same length ({va.size} != {vb.size})")
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


class RelevanceScorer:
    """Score candidates against a topic with two provider calls per request.

    The topic is embedded once and all titles in a single batch. Any provider
    failure degrades the affected relevance scores to 0 instead of failing.
    """

    def __init__(self, embedder: EmbeddingProvider) -> None:
        self.embedder = embedder

    async def score(self, topic: str, candidates: Sequence[RawArticle]) -> list[float]:
        n = len(candidates)
        if n == 0:
            return []

        try:
            topic_vec = await self.embedder.embed_one(topic)
        except Exception as e:
            logger.warning("Embedding topic %r failed, relevance degrades to 0: %s", topic, e)
            return [0.0] * n
        if not topic_vec:
            return [0.0] * n

        try:
            vectors = await self.embedder.embed_batch([c.title for c in candidates])
        except Exception as e:
            logger.warning("Embedding %d titles failed, relevance degrades to 0: %s", n, e)
            return [0.0] * n
        if len(vectors) != n:
            logger.warning("Embedding batch returned %d vectors for %d titles; ignoring", len(vectors), n)
            return [0.0] * n

        scores: list[float] = []
        for candidate, vec in zip(candidates, vectors):
            try:
                sim = cosine_similarity(topic_vec, vec)
            except ValueError as e:
                logger.warning("Cosine similarity failed for %s: %s", candidate.id, e)
                sim = 0.0
            # Anti-correlated titles rank as unrelated, not below unrelated
            scores.append(max(0.0, sim))
        return scores
