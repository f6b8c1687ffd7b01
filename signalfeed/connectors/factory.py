"""Connector factory: build connectors from the ``sources`` section of config.yaml."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from signalfeed.config import DEFAULT_SOURCES
from signalfeed.connectors.base import BaseConnector
from signalfeed.connectors.devto import DevToConnector
from signalfeed.connectors.github import GitHubConnector
from signalfeed.connectors.hackernews import HackerNewsConnector
from signalfeed.connectors.lobsters import LobstersConnector
from signalfeed.connectors.producthunt import ProductHuntConnector
from signalfeed.connectors.reddit import RedditConnector

logger = logging.getLogger(__name__)

CONNECTOR_TYPES: Dict[str, type[BaseConnector]] = {
    "hackernews": HackerNewsConnector,
    "reddit": RedditConnector,
    "devto": DevToConnector,
    "github": GitHubConnector,
    "lobsters": LobstersConnector,
    "producthunt": ProductHuntConnector,
}


def build_connector(config: Dict[str, Any]) -> BaseConnector:
    """Return a connector for one source entry. ``type`` defaults to the entry's ``id``."""
    source_type = (config.get("type") or config.get("id") or "").lower().strip()
    cls = CONNECTOR_TYPES.get(source_type)
    if cls is None:
        raise ValueError(f"Unknown source type {source_type!r} (expected one of {sorted(CONNECTOR_TYPES)})")
    return cls(config)


def build_connectors(config: Dict[str, Any]) -> List[BaseConnector]:
    """Build every enabled connector, in the order the sources are configured."""
    sources = config.get("sources")
    if sources is None:
        sources = DEFAULT_SOURCES
    connectors = [build_connector(src) for src in sources if src.get("enabled", True)]
    logger.debug("Registered connectors: %s", [c.source_id for c in connectors])
    return connectors
