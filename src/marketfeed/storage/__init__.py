"""Storage layer -- key-value persistence and the short-lived quote cache."""

from marketfeed.storage.cache import CACHE_DURATION_MS, CacheStore
from marketfeed.storage.database import KeyValueDatabase
from marketfeed.storage.kv import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore

__all__ = [
    "CACHE_DURATION_MS",
    "CacheStore",
    "InMemoryKeyValueStore",
    "KeyValueDatabase",
    "KeyValueStore",
    "SQLiteKeyValueStore",
]
