"""Persistence for provider health records.

HealthStore is injected into the tracker so tests can run against
InMemoryHealthStore while the service persists through the shared
key-value database.
"""

import json
from abc import ABC, abstractmethod

from marketfeed.exceptions import StorageError
from marketfeed.models import ProviderHealth
from marketfeed.storage.kv import KeyValueStore

HEALTH_KEY_PREFIX = "provider_health_"


class HealthStore(ABC):
    """Abstract per-provider health persistence."""

    @abstractmethod
    async def get(self, provider: str) -> ProviderHealth | None:
        """Return the stored record, or None if the provider has none."""
        ...

    @abstractmethod
    async def put(self, health: ProviderHealth) -> None:
        """Persist a record, replacing the previous one."""
        ...


class InMemoryHealthStore(HealthStore):
    """Dict-backed HealthStore. Stores copies so callers cannot alias records."""

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}

    async def get(self, provider: str) -> ProviderHealth | None:
        data = self._records.get(provider)
        return ProviderHealth.from_dict(data) if data is not None else None

    async def put(self, health: ProviderHealth) -> None:
        self._records[health.provider] = health.to_dict()


class KeyValueHealthStore(HealthStore):
    """HealthStore over a KeyValueStore, one JSON record per provider."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def get(self, provider: str) -> ProviderHealth | None:
        raw = await self._store.get(f"{HEALTH_KEY_PREFIX}{provider}")
        if raw is None:
            return None
        try:
            return ProviderHealth.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"corrupt health record for {provider}: {e}") from e

    async def put(self, health: ProviderHealth) -> None:
        await self._store.set(
            f"{HEALTH_KEY_PREFIX}{health.provider}", json.dumps(health.to_dict())
        )
