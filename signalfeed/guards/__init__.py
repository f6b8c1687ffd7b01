"""Request guards: in-flight deduplication and rate limiting."""

from signalfeed.guards.dedup import RequestDeduplicator, make_request_key
from signalfeed.guards.rate_limiter import RateLimiter, RateLimitResult, client_identifier

__all__ = [
    "RequestDeduplicator",
    "make_request_key",
    "RateLimiter",
    "RateLimitResult",
    "client_identifier",
]
