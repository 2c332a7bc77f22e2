"""Provider registry: the ordered set of configured providers.

Holds one entry per provider with its adapter, static priority and documented
rate-limit ceiling. The registry is an explicit value passed to the fetchers
and the health tracker instead of process-wide configuration.
"""

from dataclasses import dataclass

from marketfeed.logging import get_logger
from marketfeed.providers.base import ProviderAdapter

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderEntry:
    """One configured provider.

    ``priority`` of None means unranked; such providers are tried last.
    """

    provider_id: str
    adapter: ProviderAdapter
    priority: int | None = None
    rate_limit: int = 0
    rate_limit_window: str = "day"


class ProviderRegistry:
    """Ordered catalog of provider entries keyed by provider id.

    Usage:
        registry = ProviderRegistry()
        registry.register(ProviderEntry("COINGECKO", adapter, priority=5))
        registry.adapter_of("COINGECKO").fetch(request)
    """

    def __init__(self, entries: list[ProviderEntry] | None = None) -> None:
        self._entries: dict[str, ProviderEntry] = {}
        for entry in entries or []:
            self.register(entry)

    def register(self, entry: ProviderEntry) -> None:
        """Add or replace a provider entry."""
        self._entries[entry.provider_id] = entry
        logger.debug(
            "registered_provider",
            provider=entry.provider_id,
            priority=entry.priority,
        )

    def get(self, provider_id: str) -> ProviderEntry:
        entry = self._entries.get(provider_id)
        if entry is None:
            raise KeyError(
                f"Unknown provider '{provider_id}'. Available: {list(self._entries)}"
            )
        return entry

    def adapter_of(self, provider_id: str) -> ProviderAdapter:
        return self.get(provider_id).adapter

    def priority_of(self, provider_id: str) -> int | None:
        entry = self._entries.get(provider_id)
        return entry.priority if entry is not None else None

    @property
    def provider_ids(self) -> list[str]:
        return list(self._entries)

    @property
    def entries(self) -> list[ProviderEntry]:
        return list(self._entries.values())

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
