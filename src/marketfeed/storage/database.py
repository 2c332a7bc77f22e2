"""aiosqlite connection manager for the key-value table.

The cache and the provider health records share one ``kv_store`` table. The
schema is versioned: ``connect`` applies every migration newer than the
version recorded in ``schema_version``.
"""

import os
from typing import Self

import aiosqlite

from marketfeed.logging import get_logger

logger = get_logger(__name__)

IN_MEMORY = ":memory:"

#: Schema version -> DDL that upgrades the previous version to it.
_MIGRATIONS: dict[int, str] = {
    1: """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at INTEGER NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_kv_updated_at ON kv_store(updated_at);
    """,
}

SCHEMA_VERSION = max(_MIGRATIONS)


class KeyValueDatabase:
    """Owns the aiosqlite connection behind SQLiteKeyValueStore.

    Usage:
        async with KeyValueDatabase("data/market_feed.db") as database:
            store = SQLiteKeyValueStore(database)
    """

    def __init__(self, db_path: str = "data/market_feed.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection. Raises RuntimeError before connect()."""
        if self._connection is None:
            raise RuntimeError(f"KeyValueDatabase {self._db_path} is not connected")
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Open the database and bring its schema up to SCHEMA_VERSION."""
        if self._db_path != IN_MEMORY:
            parent = os.path.dirname(self._db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)

        connection = await aiosqlite.connect(self._db_path)
        if self._db_path != IN_MEMORY:
            # readers keep going while a fetch commits a cache entry
            await connection.execute("PRAGMA journal_mode=WAL")
            await connection.execute("PRAGMA synchronous=NORMAL")
        self._connection = connection

        await self._migrate()
        logger.info("kv_db_connected", db_path=self._db_path, schema_version=SCHEMA_VERSION)

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("kv_db_closed", db_path=self._db_path)

    async def _migrate(self) -> None:
        db = self.db
        await db.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER PRIMARY KEY)")
        cursor = await db.execute("SELECT MAX(version) FROM schema_version")
        row = await cursor.fetchone()
        current = row[0] if row is not None and row[0] is not None else 0

        for version in sorted(v for v in _MIGRATIONS if v > current):
            await db.executescript(_MIGRATIONS[version])
            await db.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
            logger.info("kv_schema_migrated", version=version)
        await db.commit()

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
