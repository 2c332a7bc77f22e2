"""Tests for the key-value stores (in-memory and aiosqlite-backed)."""

import pytest

from marketfeed.exceptions import StorageError
from marketfeed.storage.database import SCHEMA_VERSION, KeyValueDatabase
from marketfeed.storage.kv import InMemoryKeyValueStore, SQLiteKeyValueStore


class TestInMemoryKeyValueStore:
    @pytest.mark.asyncio
    async def test_set_get_delete(self) -> None:
        store = InMemoryKeyValueStore()
        await store.set("a", "1")
        assert await store.get("a") == "1"

        await store.delete("a")
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_noop(self) -> None:
        await InMemoryKeyValueStore().delete("missing")

    @pytest.mark.asyncio
    async def test_keys_by_prefix(self) -> None:
        store = InMemoryKeyValueStore()
        await store.set("provider_health_A", "{}")
        await store.set("provider_health_B", "{}")
        await store.set("forex_EUR_USD", "{}")

        assert sorted(await store.keys("provider_health_")) == [
            "provider_health_A",
            "provider_health_B",
        ]


class TestSQLiteKeyValueStore:
    @pytest.mark.asyncio
    async def test_roundtrip_persists_across_connections(self, tmp_path) -> None:
        db_path = str(tmp_path / "feed" / "kv.db")

        async with KeyValueDatabase(db_path) as database:
            await SQLiteKeyValueStore(database).set("forex_EUR_USD", "payload")

        async with KeyValueDatabase(db_path) as database:
            assert await SQLiteKeyValueStore(database).get("forex_EUR_USD") == "payload"

    @pytest.mark.asyncio
    async def test_overwrite_and_delete(self, tmp_path) -> None:
        async with KeyValueDatabase(str(tmp_path / "kv.db")) as database:
            store = SQLiteKeyValueStore(database)
            await store.set("k", "1")
            await store.set("k", "2")
            assert await store.get("k") == "2"

            await store.delete("k")
            assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_prefix_scan_escapes_wildcards(self, tmp_path) -> None:
        async with KeyValueDatabase(str(tmp_path / "kv.db")) as database:
            store = SQLiteKeyValueStore(database)
            await store.set("provider_health_COINGECKO", "{}")
            await store.set("providerXhealthXY", "{}")

            assert await store.keys("provider_health_") == ["provider_health_COINGECKO"]

    @pytest.mark.asyncio
    async def test_unconnected_database_raises_storage_error(self) -> None:
        store = SQLiteKeyValueStore(KeyValueDatabase(":memory:"))

        with pytest.raises(StorageError):
            await store.get("k")
        with pytest.raises(StorageError):
            await store.set("k", "v")


class TestKeyValueDatabase:
    @pytest.mark.asyncio
    async def test_schema_version_recorded_once(self, tmp_path) -> None:
        db_path = str(tmp_path / "kv.db")
        async with KeyValueDatabase(db_path):
            pass

        async with KeyValueDatabase(db_path) as database:
            cursor = await database.db.execute("SELECT version FROM schema_version")
            rows = await cursor.fetchall()

        assert [row[0] for row in rows] == [SCHEMA_VERSION]

    @pytest.mark.asyncio
    async def test_in_memory_database(self) -> None:
        async with KeyValueDatabase(":memory:") as database:
            assert database.is_connected
            await SQLiteKeyValueStore(database).set("k", "v")

        assert not database.is_connected

    def test_db_before_connect_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            KeyValueDatabase(":memory:").db
