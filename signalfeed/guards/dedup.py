"""Collapse concurrent identical requests into one in-flight computation."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_AGE_SECONDS = 30.0


def make_request_key(operation: str, params: Dict[str, Any]) -> str:
    """Stable key for an operation and its parameters."""
    return f"{operation}:{json.dumps(params, sort_keys=True, default=str)}"


@dataclass
class PendingRequest:
    key: str
    task: asyncio.Future
    created_at: float
    waiters: int = 0
    cancel_requested: bool = False


class RequestDeduplicator:
    """At most one concurrent computation per key.

    Callers arriving while a computation for the same key is younger than
    ``max_age_seconds`` await the same task. The entry is dropped as soon as
    the task finishes, whatever the outcome, so later calls start fresh work.

    Waiters are shielded from each other: cancelling one caller leaves the
    shared task running for the rest. Once every waiter has gone the task is
    cancelled, and its key stays occupied until the task actually finishes
    (or the entry goes stale). A caller arriving in that gap waits for the
    cancelled task to wind down and then starts fresh work instead of
    inheriting the cancellation.

    The pending table is only touched from the event loop thread and no
    ``await`` happens between lookup and insert, so each key is updated
    atomically.
    """

    def __init__(
        self,
        max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._pending: Dict[str, PendingRequest] = {}

    async def execute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        while True:
            now = self._clock()
            pending = self._pending.get(key)
            if pending is not None and now - pending.created_at >= self.max_age_seconds:
                logger.debug("Dedup: pending request for %s is stale, starting fresh", key)
                del self._pending[key]
                pending = None

            if pending is not None and pending.cancel_requested:
                if not pending.task.done():
                    # Abandoned work still holds the key; wait it out, then start over
                    logger.debug("Dedup: waiting for cancelled request for %s to finish", key)
                    await asyncio.wait({pending.task})
                    continue
                if self._pending.get(key) is pending:
                    del self._pending[key]
                pending = None
            break

        if pending is None:
            task = asyncio.ensure_future(compute())
            pending = PendingRequest(key=key, task=task, created_at=now)
            self._pending[key] = pending
            task.add_done_callback(lambda _t, entry=pending: self._release(entry))
        else:
            logger.debug("Dedup: reusing pending request for %s", key)

        pending.waiters += 1
        try:
            return await asyncio.shield(pending.task)
        finally:
            pending.waiters -= 1
            if pending.waiters == 0 and not pending.task.done():
                pending.cancel_requested = True
                pending.task.cancel()

    def _release(self, entry: PendingRequest) -> None:
        # A stale entry finishing late must not evict its replacement
        if self._pending.get(entry.key) is entry:
            del self._pending[entry.key]
        if entry.task.cancelled():
            logger.debug("Dedup: computation for %s was cancelled", entry.key)

    def pending_count(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Forget every pending entry. Running tasks are left to finish."""
        self._pending.clear()
