"""Error taxonomy.

Only admission failures (rate limiting) reach the caller of the engine.
Connector, embedding and summarization failures are absorbed at their own
boundaries and degrade to empty or fallback values.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


class SignalFeedError(Exception):
    """Base class for errors surfaced to API clients."""

    code = "INTERNAL_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class RateLimitExceeded(SignalFeedError):
    """Admission denied by the rate limiter. Retryable after ``retry_after_seconds``."""

    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, identifier: str, reset_at: float, retry_after_seconds: int) -> None:
        self.identifier = identifier
        self.reset_at = reset_at
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded. Try again in {retry_after_seconds} seconds."
        )

    @property
    def reset_time(self) -> str:
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["resetTime"] = self.reset_time
        out["retryAfter"] = self.retry_after_seconds
        return out


class InvalidTopicError(SignalFeedError):
    """Topic rejected by input validation at the query layer."""

    code = "BAD_USER_INPUT"
