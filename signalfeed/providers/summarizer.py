"""Topic-aware article summaries with multi-provider support (OpenAI, Anthropic, local, mock)."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections import OrderedDict
from typing import Any, Optional, Sequence

from signalfeed.models import RawArticle
from signalfeed.ranking.scorer import fallback_summary

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise, informative summaries of articles. "
    "Focus on the key points and how they relate to the user's topic of interest."
)

DEFAULT_ANTHROPIC_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_CACHED_SUMMARIES = 1000


class SummarizerAdapter:
    """Generate one summary per article without ever failing the caller.

    Articles are sent in groups of ``batch_size``: requests inside a group run
    concurrently, groups run one after another. Output order matches input
    order. Failed or empty summaries fall back to a fixed template.

    Successful summaries are kept in an LRU cache of at most
    ``max_cached_summaries`` entries.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        llm = config.get("llm", {})
        self.provider: str = llm.get("provider", "openai")
        self.model: str = llm.get("model", "gpt-4o-mini")
        self.max_tokens: int = llm.get("max_tokens", 150)
        self.temperature: float = llm.get("temperature", 0.7)
        self.batch_size: int = max(1, int(llm.get("batch_size", 5)))
        self.cache_summaries: bool = llm.get("cache_summaries", True)
        self.local_url: str = llm.get("local_url", "http://localhost:11434/v1")
        self.local_model: str = llm.get("local_model", "llama3.2")
        self.anthropic_model: str = llm.get("anthropic_model", DEFAULT_ANTHROPIC_MODEL)
        self.max_cached_summaries: int = max(1, int(llm.get("max_cached_summaries", DEFAULT_MAX_CACHED_SUMMARIES)))

        self._cache: OrderedDict[str, str] = OrderedDict()
        self._clients: dict[str, Any] = {}

    async def summarize(self, topic: str, articles: Sequence[RawArticle]) -> list[str]:
        results: list[str] = [""] * len(articles)
        pending: list[int] = []
        for i, article in enumerate(articles):
            cached = self._cache_get(self._cache_key(topic, article)) if self.cache_summaries else None
            if cached:
                results[i] = cached
            else:
                pending.append(i)

        for start in range(0, len(pending), self.batch_size):
            group = pending[start : start + self.batch_size]
            try:
                outcomes = await asyncio.gather(
                    *(self.summarize_one(articles[i].title, articles[i].url, topic) for i in group),
                    return_exceptions=True,
                )
            except Exception as e:
                logger.warning("Summary batch of %d failed: %s", len(group), e)
                outcomes = [e] * len(group)

            for i, outcome in zip(group, outcomes):
                article = articles[i]
                if isinstance(outcome, BaseException):
                    logger.warning("Summary failed for %s: %s", article.id, outcome)
                    results[i] = fallback_summary(article)
                    continue
                text = (outcome or "").strip()
                if not text:
                    results[i] = fallback_summary(article)
                    continue
                results[i] = text
                if self.cache_summaries:
                    self._cache_put(self._cache_key(topic, article), text)

        return results

    async def summarize_one(self, title: str, url: str, topic: str) -> str:
        """Dispatch to the configured provider."""
        prompt = self._build_prompt(title, url, topic)

        if self.provider == "mock":
            return self._mock_summary(title, topic)
        elif self.provider == "openai":
            return await self._call_openai(prompt)
        elif self.provider == "anthropic":
            return await self._call_anthropic(prompt)
        elif self.provider == "local":
            return await self._call_local(prompt)
        raise ValueError(f"Unknown summarization provider {self.provider!r}")

    # ------------------------------------------------------------------
    # Provider implementations
    # ------------------------------------------------------------------

    async def _call_openai(self, prompt: str) -> str:
        client = self._get_client("openai")
        resp = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return resp.choices[0].message.content or ""

    async def _call_anthropic(self, prompt: str) -> str:
        client = self._get_client("anthropic")
        resp = await client.messages.create(
            model=self.anthropic_model,
            max_tokens=self.max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        return resp.content[0].text

    async def _call_local(self, prompt: str) -> str:
        """Call a local Ollama-compatible OpenAI API."""
        client = self._get_client("local")
        resp = await client.chat.completions.create(
            model=self.local_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return resp.choices[0].message.content or ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_prompt(title: str, url: str, topic: str) -> str:
        return (
            f'Generate a concise 1-2 sentence summary of what this article is about, '
            f'focusing on how it relates to "{topic}".\n\n'
            f"Title: {title}\n"
            f"URL: {url}\n\n"
            f"Summary:"
        )

    @staticmethod
    def _mock_summary(title: str, topic: str) -> str:
        """Template-based summary for testing (no API calls)."""
        return f"{title} (related to {topic})."

    @staticmethod
    def _cache_key(topic: str, article: RawArticle) -> str:
        raw = f"{topic}:{article.url}:{article.title}"
        return hashlib.sha256(raw.encode()).hexdigest()[:16]

    def _cache_get(self, key: str) -> Optional[str]:
        text = self._cache.get(key)
        if text is not None:
            self._cache.move_to_end(key)
        return text

    def _cache_put(self, key: str, text: str) -> None:
        self._cache[key] = text
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_cached_summaries:
            self._cache.popitem(last=False)

    def _get_client(self, provider: str) -> Any:
        """One lazily created client per provider, reused across calls."""
        client = self._clients.get(provider)
        if client is None:
            if provider == "anthropic":
                from anthropic import AsyncAnthropic

                client = AsyncAnthropic()
            else:
                from openai import AsyncOpenAI

                if provider == "local":
                    client = AsyncOpenAI(base_url=self.local_url, api_key="ollama")
                else:
                    client = AsyncOpenAI()
            self._clients[provider] = client
        return client
