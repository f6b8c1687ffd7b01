"""Source connectors for SignalFeed.

Supported types: hackernews, reddit, devto, github, lobsters, producthunt.
"""

from signalfeed.connectors.base import BaseConnector, Connector
from signalfeed.connectors.factory import build_connector, build_connectors
from signalfeed.connectors.hackernews import HackerNewsConnector
from signalfeed.connectors.reddit import RedditConnector
from signalfeed.connectors.devto import DevToConnector
from signalfeed.connectors.github import GitHubConnector
from signalfeed.connectors.lobsters import LobstersConnector
from signalfeed.connectors.producthunt import ProductHuntConnector

__all__ = [
    "BaseConnector",
    "Connector",
    "build_connector",
    "build_connectors",
    "HackerNewsConnector",
    "RedditConnector",
    "DevToConnector",
    "GitHubConnector",
    "LobstersConnector",
    "ProductHuntConnector",
]
