"""SignalFeed: rank articles from several content platforms against a topic."""

from signalfeed.config import load_config
from signalfeed.errors import InvalidTopicError, RateLimitExceeded, SignalFeedError
from signalfeed.models import DataSource, FeedItem, RawArticle
from signalfeed.pipeline.service import FeedService, build_guards

__all__ = [
    "load_config",
    "InvalidTopicError",
    "RateLimitExceeded",
    "SignalFeedError",
    "DataSource",
    "FeedItem",
    "RawArticle",
    "FeedService",
    "build_guards",
]
__version__ = "0.1.0"
