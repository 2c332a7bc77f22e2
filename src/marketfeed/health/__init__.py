"""Provider health tracking -- rolling success/failure records and ranking."""

from marketfeed.health.store import HealthStore, InMemoryHealthStore, KeyValueHealthStore
from marketfeed.health.tracker import FAILURE_THRESHOLD, ProviderHealthTracker

__all__ = [
    "FAILURE_THRESHOLD",
    "HealthStore",
    "InMemoryHealthStore",
    "KeyValueHealthStore",
    "ProviderHealthTracker",
]
