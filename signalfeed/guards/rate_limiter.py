"""Fixed-window, per-identifier admission control.

One RateLimitEntry per identifier. The first request opens a window of
``window_seconds``; up to ``max_requests`` calls are admitted inside it.
After ``reset_at`` the next call opens a new window. A background sweep
purges expired entries.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_MAX_REQUESTS = 10
DEFAULT_CLEANUP_INTERVAL_SECONDS = 60.0
UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitEntry:
    identifier: str
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after_seconds(self, now: float) -> int:
        """Whole seconds until the window resets, at least 1."""
        return max(1, math.ceil(self.reset_at - now))


class RateLimiter:
    """In-process fixed-window rate limiter.

    ``check`` never awaits, so under the event loop each identifier's entry is
    read and updated atomically without a lock.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        cleanup_interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self.clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def check(self, identifier: str) -> RateLimitResult:
        now = self.clock()
        entry = self._entries.get(identifier)

        if entry is None or now > entry.reset_at:
            entry = RateLimitEntry(identifier=identifier, count=1, reset_at=now + self.window_seconds)
            self._entries[identifier] = entry
            return RateLimitResult(allowed=True, remaining=self.max_requests - 1, reset_at=entry.reset_at)

        if entry.count >= self.max_requests:
            logger.info("RateLimiter: %s over limit until %.0f", identifier, entry.reset_at)
            return RateLimitResult(allowed=False, remaining=0, reset_at=entry.reset_at)

        entry.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - entry.count,
            reset_at=entry.reset_at,
        )

    def cleanup(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self.clock()
        expired = [k for k, e in self._entries.items() if now > e.reset_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("RateLimiter: purged %d expired entries", len(expired))
        return len(expired)

    def reset(self, identifier: str) -> None:
        self._entries.pop(identifier, None)

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic cleanup task on the running loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep())

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None

    async def __aenter__(self) -> "RateLimiter":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _sweep(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval_seconds)
            self.cleanup()


def client_identifier(headers: Mapping[str, str], remote: Optional[str] = None) -> str:
    """Pick the client address: X-Forwarded-For (first hop), X-Real-IP, the socket peer, else "unknown"."""
    forwarded = headers.get("X-Forwarded-For") or headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("X-Real-IP") or headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return remote or UNKNOWN_CLIENT
