"""Short-lived quote cache with a fixed expiry.

Entries are stored as JSON ``{"data": ..., "timestamp": ms}`` in a
KeyValueStore. A read older than the configured duration is a miss and the
stale entry is evicted. Storage or decode failures are logged and degrade to
a miss (reads) or a no-op (writes); the cache never raises.
"""

import json
from collections.abc import Callable
from typing import Any

from marketfeed.exceptions import StorageError
from marketfeed.logging import get_logger
from marketfeed.models import now_ms
from marketfeed.storage.kv import KeyValueStore

logger = get_logger(__name__)

CACHE_DURATION_MS = 60_000


class CacheStore:
    """Read-through cache for normalized fetch results.

    Args:
        store: Backing key-value store.
        duration_ms: Freshness window; an entry is served while
            ``now - timestamp < duration_ms``.
        clock: Millisecond clock, injectable for tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        duration_ms: int = CACHE_DURATION_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._duration_ms = duration_ms
        self._clock = clock

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    async def get(self, key: str) -> Any | None:
        """Return cached data for ``key`` if still fresh, else None."""
        try:
            raw = await self._store.get(key)
        except StorageError as e:
            logger.warning("cache_read_error", key=key, error=str(e))
            return None

        if raw is None:
            return None

        try:
            entry = json.loads(raw)
            data, timestamp = entry["data"], int(entry["timestamp"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("cache_entry_corrupt", key=key, error=str(e))
            return None

        age = self._clock() - timestamp
        if age < self._duration_ms:
            logger.debug("cache_hit", key=key, age_ms=age)
            return data

        await self._evict(key)
        return None

    async def set(self, key: str, data: Any) -> None:
        """Store ``data`` under ``key`` stamped with the current time."""
        payload = json.dumps({"data": data, "timestamp": self._clock()})
        try:
            await self._store.set(key, payload)
        except StorageError as e:
            logger.warning("cache_write_error", key=key, error=str(e))

    async def _evict(self, key: str) -> None:
        try:
            await self._store.delete(key)
        except StorageError as e:
            logger.debug("cache_evict_error", key=key, error=str(e))
