# Pending CSRF state table for in-flight logins.
# Created: 2026-10-12
#
# In-memory only. Entries expire after ``ttl_seconds`` (10 min by default) so
# abandoned logins do not accumulate.

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_STATE_TTL = 600


class SessionStore:
    """Maps pending state tokens to their creation time.

    All operations take one ``asyncio.Lock`` so concurrent login and callback
    handlers observe each other's inserts and removals in order.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_STATE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._pending: dict[str, float] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._pending)

    def _expired(self, created_at: float, now: float) -> bool:
        return now - created_at > self.ttl_seconds

    async def add(self, state: str) -> None:
        async with self._lock:
            now = self._clock()
            self._evict(now)
            self._pending[state] = now

    async def contains(self, state: str) -> bool:
        async with self._lock:
            created_at = self._pending.get(state)
            return created_at is not None and not self._expired(created_at, self._clock())

    async def consume(self, state: str) -> bool:
        """Remove *state* and report whether it was pending and unexpired."""
        async with self._lock:
            created_at = self._pending.pop(state, None)
            if created_at is None:
                return False
            if self._expired(created_at, self._clock()):
                logger.info("Rejected expired login state")
                return False
            return True

    async def cleanup_expired(self) -> int:
        async with self._lock:
            return self._evict(self._clock())

    def _evict(self, now: float) -> int:
        expired = [k for k, created in self._pending.items() if self._expired(created, now)]
        for k in expired:
            del self._pending[k]
        if expired:
            logger.debug("Evicted %d expired login states", len(expired))
        return len(expired)
