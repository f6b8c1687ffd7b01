"""Engine entry point, HTTP query layer and CLI."""

from signalfeed.pipeline.service import FeedService, build_guards

__all__ = ["FeedService", "build_guards"]
