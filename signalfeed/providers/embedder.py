"""Text embedding provider (OpenAI, local OpenAI-compatible, or mock)."""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Any, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\w+")


def hashed_bag_of_words(text: str, dimensions: int) -> list[float]:
    """Deterministic unit vector from hashed lowercase tokens. Empty text gives a zero vector."""
    vec = np.zeros(dimensions)
    for token in _TOKEN.findall(text.lower()):
        digest = hashlib.md5(token.encode("utf-8")).digest()
        vec[int.from_bytes(digest[:4], "little") % dimensions] += 1.0
    norm = np.linalg.norm(vec)
    if norm > 0:
        vec /= norm
    return vec.tolist()


class Embedder:
    """Embed texts with the configured provider.

    ``embed_batch`` issues one provider request for the whole list and returns
    vectors in input order.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        emb = config.get("embedding", {})
        self.provider: str = emb.get("provider", "openai")
        self.model: str = emb.get("model", "text-embedding-3-small")
        self.dimensions: int = int(emb.get("dimensions", 256))
        self.local_url: str = emb.get("local_url", "http://localhost:11434/v1")
        self._client: Any = None

    async def embed_one(self, text: str) -> list[float]:
        trimmed = text.strip()
        if not trimmed:
            return []
        vectors = await self._embed([trimmed])
        return vectors[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        # Providers reject empty strings
        cleaned = [t.strip() or " " for t in texts]
        vectors = await self._embed(cleaned)
        if len(vectors) != len(cleaned):
            raise ValueError(f"Provider returned {len(vectors)} embeddings for {len(cleaned)} texts")
        return vectors

    async def _embed(self, texts: list[str]) -> list[list[float]]:
        if self.provider == "mock":
            return [hashed_bag_of_words(t, self.dimensions) for t in texts]
        if self.provider in ("openai", "local"):
            return await self._call_openai(texts)
        raise ValueError(f"Unknown embedding provider {self.provider!r}")

    async def _call_openai(self, texts: list[str]) -> list[list[float]]:
        client = self._get_client()
        resp = await client.embeddings.create(model=self.model, input=texts)
        ordered = sorted(resp.data, key=lambda d: d.index)
        return [list(d.embedding) for d in ordered]

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import AsyncOpenAI

            if self.provider == "local":
                self._client = AsyncOpenAI(base_url=self.local_url, api_key="ollama")
            else:
                self._client = AsyncOpenAI()
        return self._client
