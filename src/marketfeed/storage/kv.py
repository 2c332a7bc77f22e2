"""Key-value storage capability used by the cache and the health tracker.

Two implementations: SQLiteKeyValueStore for the running service and
InMemoryKeyValueStore for tests and the ``memory`` cache backend. Both raise
StorageError on failure; callers decide how to degrade.
"""

import asyncio
import time
from abc import ABC, abstractmethod

import aiosqlite

from marketfeed.exceptions import StorageError
from marketfeed.storage.database import KeyValueDatabase


class KeyValueStore(ABC):
    """Abstract string-to-string store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, overwriting any previous one."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with ``prefix``."""
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store guarded by an asyncio.Lock."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        async with self._lock:
            return [k for k in self._data if k.startswith(prefix)]


class SQLiteKeyValueStore(KeyValueStore):
    """Persistent store over the ``kv_store`` table."""

    def __init__(self, database: KeyValueDatabase) -> None:
        self._database = database

    async def get(self, key: str) -> str | None:
        try:
            cursor = await self._database.db.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, RuntimeError) as e:
            raise StorageError(f"read failed for {key}: {e}") from e
        return row[0] if row is not None else None

    async def set(self, key: str, value: str) -> None:
        now_ms = int(time.time() * 1000)
        try:
            await self._database.db.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) "
                "VALUES (?, ?, ?)",
                (key, value, now_ms),
            )
            await self._database.db.commit()
        except (aiosqlite.Error, RuntimeError) as e:
            raise StorageError(f"write failed for {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._database.db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await self._database.db.commit()
        except (aiosqlite.Error, RuntimeError) as e:
            raise StorageError(f"delete failed for {key}: {e}") from e

    async def keys(self, prefix: str = "") -> list[str]:
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        try:
            cursor = await self._database.db.execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                (f"{escaped}%",),
            )
            rows = await cursor.fetchall()
        except (aiosqlite.Error, RuntimeError) as e:
            raise StorageError(f"key scan failed for prefix {prefix!r}: {e}") from e
        return [row[0] for row in rows]
