"""Rolling provider health tracking and health-ranked provider ordering.

A provider is quarantined once its failure count reaches FAILURE_THRESHOLD.
Each success decrements the failure count by one (floored at zero) and
restores the provider immediately, so intermittent failures never exclude a
provider permanently.
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable

from marketfeed.exceptions import StorageError
from marketfeed.health.store import HealthStore
from marketfeed.logging import get_logger
from marketfeed.models import ProviderHealth, now_ms
from marketfeed.providers.registry import ProviderRegistry

logger = get_logger(__name__)

FAILURE_THRESHOLD = 3

#: Sort key for providers without a configured priority.
_UNRANKED = float("inf")


class ProviderHealthTracker:
    """Reads, updates and ranks per-provider health records.

    Updates to the same provider are serialized with a per-provider
    asyncio.Lock so concurrent fetches cannot lose a read-modify-write.
    Updates to different providers proceed independently.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: HealthStore,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._store = store
        self._clock = clock
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get_health(self, provider: str) -> ProviderHealth:
        """Return the persisted record, or a fresh healthy default."""
        try:
            health = await self._store.get(provider)
        except StorageError as e:
            logger.warning("health_read_error", provider=provider, error=str(e))
            health = None

        if health is None:
            return ProviderHealth(provider=provider, last_checked=self._clock())
        return health

    async def record_result(self, provider: str, success: bool) -> ProviderHealth:
        """Fold one call outcome into the provider's health record."""
        async with self._locks[provider]:
            health = await self.get_health(provider)
            health.last_checked = self._clock()

            if success:
                health.success_count += 1
                # a success always readmits the provider; concurrent failures
                # can push the count past the threshold, so clamp below it
                health.failure_count = min(
                    max(0, health.failure_count - 1), FAILURE_THRESHOLD - 1
                )
            else:
                health.failure_count += 1
            health.is_healthy = health.failure_count < FAILURE_THRESHOLD

            try:
                await self._store.put(health)
            except StorageError as e:
                logger.warning("health_write_error", provider=provider, error=str(e))

        if not success and not health.is_healthy:
            logger.warning(
                "provider_quarantined",
                provider=provider,
                failure_count=health.failure_count,
            )
        return health

    async def rank_healthy_providers(self) -> list[str]:
        """Healthy providers ascending by priority; unprioritized last."""
        healthy = [
            provider
            for provider in self._registry.provider_ids
            if (await self.get_health(provider)).is_healthy
        ]

        def _priority(provider: str) -> float:
            priority = self._registry.priority_of(provider)
            return _UNRANKED if priority is None else priority

        return sorted(healthy, key=_priority)

    async def get_all(self) -> list[ProviderHealth]:
        """Health for every configured provider, in registry order."""
        return [await self.get_health(p) for p in self._registry.provider_ids]
