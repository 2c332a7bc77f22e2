"""Tests for CacheStore -- freshness window, eviction and degraded storage."""

import json

import pytest

from conftest import FakeClock
from marketfeed.storage.cache import CACHE_DURATION_MS, CacheStore
from marketfeed.storage.database import KeyValueDatabase
from marketfeed.storage.kv import InMemoryKeyValueStore, SQLiteKeyValueStore


class TestCacheFreshness:
    @pytest.mark.asyncio
    async def test_fresh_entry_is_served(self, cache: CacheStore, clock: FakeClock) -> None:
        await cache.set("forex_EUR_USD", {"price": "1.08"})
        clock.advance(CACHE_DURATION_MS - 1)

        assert await cache.get("forex_EUR_USD") == {"price": "1.08"}

    @pytest.mark.asyncio
    async def test_entry_expires_at_duration(self, cache: CacheStore, clock: FakeClock) -> None:
        await cache.set("forex_EUR_USD", {"price": "1.08"})
        clock.advance(CACHE_DURATION_MS)

        assert await cache.get("forex_EUR_USD") is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_evicted(
        self, cache: CacheStore, kv_store: InMemoryKeyValueStore, clock: FakeClock
    ) -> None:
        await cache.set("crypto_bitcoin", {"price": "42000"})
        clock.advance(CACHE_DURATION_MS + 5_000)

        await cache.get("crypto_bitcoin")

        assert await kv_store.get("crypto_bitcoin") is None

    @pytest.mark.asyncio
    async def test_missing_key_is_miss(self, cache: CacheStore) -> None:
        assert await cache.get("commodity_XAUUSD") is None

    @pytest.mark.asyncio
    async def test_set_overwrites_and_restamps(self, cache: CacheStore, clock: FakeClock) -> None:
        await cache.set("k", 1)
        clock.advance(50_000)
        await cache.set("k", 2)
        clock.advance(50_000)

        assert await cache.get("k") == 2

    @pytest.mark.asyncio
    async def test_stored_layout(
        self, cache: CacheStore, kv_store: InMemoryKeyValueStore, clock: FakeClock
    ) -> None:
        await cache.set("k", [1, 2])

        raw = json.loads(await kv_store.get("k"))
        assert raw == {"data": [1, 2], "timestamp": clock.now}

    @pytest.mark.asyncio
    async def test_custom_duration(self, kv_store: InMemoryKeyValueStore, clock: FakeClock) -> None:
        short = CacheStore(kv_store, duration_ms=1_000, clock=clock)
        await short.set("k", "v")
        clock.advance(1_000)

        assert await short.get("k") is None


class TestCacheDegradation:
    @pytest.mark.asyncio
    async def test_corrupt_entry_is_miss(
        self, cache: CacheStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        await kv_store.set("k", "not json")

        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_entry_without_timestamp_is_miss(
        self, cache: CacheStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        await kv_store.set("k", json.dumps({"data": 1}))

        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_unavailable_storage_reads_as_miss(self, clock: FakeClock) -> None:
        # never connected: every store operation raises StorageError
        broken = CacheStore(SQLiteKeyValueStore(KeyValueDatabase(":memory:")), clock=clock)

        assert await broken.get("k") is None

    @pytest.mark.asyncio
    async def test_unavailable_storage_write_does_not_raise(self, clock: FakeClock) -> None:
        broken = CacheStore(SQLiteKeyValueStore(KeyValueDatabase(":memory:")), clock=clock)

        await broken.set("k", {"v": 1})
