"""External model providers: embeddings and summaries."""

from signalfeed.providers.embedder import Embedder
from signalfeed.providers.summarizer import SummarizerAdapter

__all__ = ["Embedder", "SummarizerAdapter"]
