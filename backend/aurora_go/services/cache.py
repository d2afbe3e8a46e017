"""Short-TTL in-memory cache with single-flight miss handling.

Each upstream source gets its own ``TTLCache``. Concurrent misses for the same
key share one in-flight fetch instead of each calling the upstream. The clock
is injectable so expiry can be tested without sleeping.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class TTLCache:
    def __init__(self, ttl_seconds: float, name: str = "cache", clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()
        self._in_flight.clear()

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        should_cache: Callable[[Any], bool] | None = None,
    ) -> Any:
        """Return the cached value, or run ``fetch`` once for all concurrent callers.

        ``should_cache`` can veto storing a result (e.g. degraded fallbacks), in
        which case the next call fetches again.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("%s miss for %s", self.name, key)
            task = asyncio.ensure_future(self._fetch_and_store(key, fetch, should_cache))
            self._in_flight[key] = task

        # Shielded so a cancelled caller never cancels the fetch other callers share
        return await asyncio.shield(task)

    async def _fetch_and_store(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        should_cache: Callable[[Any], bool] | None,
    ) -> Any:
        try:
            value = await fetch()
            if value is not None and (should_cache is None or should_cache(value)):
                self.set(key, value)
            return value
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]
