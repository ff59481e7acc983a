from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

import anyio
import anysqlite

from pahest._core._storages._async_base import AsyncBaseCacheStore, AsyncBasePartition, make_cache_key
from pahest._core._storages._packing import pack, unpack
from pahest._core.models import Request, Response
from pahest._utils import ensure_cache_dict

logger = logging.getLogger("pahest.storages")


class AsyncSqlitePartition(AsyncBasePartition):
    def __init__(self, name: str, store: "AsyncSqliteCacheStore") -> None:
        super().__init__(name)
        self._store = store

    async def match(self, request: Request) -> Optional[Response]:
        connection = await self._store._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute(
            "SELECT data FROM entries WHERE partition = ? AND cache_key = ?",
            (self.name, make_cache_key(request)),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return unpack(row[0])

    async def put(self, request: Request, response: Response) -> None:
        body = await response.aread()
        data = pack(request, response, body)

        connection = await self._store._ensure_connection()
        async with self._store._lock:
            cursor = await connection.cursor()
            # The partition may have been deleted while this handle was held; re-create it like `open` does.
            await cursor.execute(
                "INSERT OR IGNORE INTO partitions (name, created_at) VALUES (?, ?)",
                (self.name, time.time()),
            )
            await cursor.execute(
                "INSERT OR REPLACE INTO entries (partition, cache_key, data, created_at) VALUES (?, ?, ?, ?)",
                (self.name, make_cache_key(request), data, time.time()),
            )
            await connection.commit()


class AsyncSqliteCacheStore(AsyncBaseCacheStore):
    """
    A durable cache store backed by sqlite.

    :param connection: An already opened connection. When omitted, `database_path` is opened
        lazily on first use, relative to `.cache/pahest` if it has no parent directory.
    :type connection: Optional[anysqlite.Connection]
    :param database_path: Location of the database file, defaults to "pahest_cache.db"
    :type database_path: Union[str, Path]
    """

    def __init__(
        self,
        *,
        connection: Optional[anysqlite.Connection] = None,
        database_path: Union[str, Path] = "pahest_cache.db",
    ) -> None:
        self.connection = connection
        self.database_path: Path = database_path if isinstance(database_path, Path) else Path(database_path)
        self._initialized = False
        self._setup_lock = anyio.Lock()
        self._lock = anyio.Lock()

    async def _ensure_connection(self) -> anysqlite.Connection:
        """Ensure connection is established and database is initialized."""
        async with self._setup_lock:
            if self.connection is None:
                parent = self.database_path.parent if self.database_path.parent != Path(".") else None
                full_path = ensure_cache_dict(parent) / self.database_path.name
                self.connection = await anysqlite.connect(str(full_path))
            if not self._initialized:
                await self._initialize_database()
                self._initialized = True
        return self.connection

    async def _initialize_database(self) -> None:
        assert self.connection is not None
        cursor = await self.connection.cursor()

        await cursor.execute("""
            CREATE TABLE IF NOT EXISTS partitions (
                name TEXT PRIMARY KEY,
                created_at REAL NOT NULL
            )
        """)

        await cursor.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                partition TEXT NOT NULL,
                cache_key TEXT NOT NULL,
                data BLOB NOT NULL,
                created_at REAL NOT NULL,
                PRIMARY KEY (partition, cache_key)
            )
        """)

        await self.connection.commit()

    async def open(self, name: str) -> AsyncSqlitePartition:
        connection = await self._ensure_connection()
        async with self._lock:
            cursor = await connection.cursor()
            await cursor.execute(
                "INSERT OR IGNORE INTO partitions (name, created_at) VALUES (?, ?)",
                (name, time.time()),
            )
            await connection.commit()
        return AsyncSqlitePartition(name, self)

    async def keys(self) -> List[str]:
        connection = await self._ensure_connection()
        cursor = await connection.cursor()
        await cursor.execute("SELECT name FROM partitions ORDER BY created_at, rowid")
        return [row[0] for row in await cursor.fetchall()]

    async def delete(self, name: str) -> bool:
        connection = await self._ensure_connection()
        async with self._lock:
            cursor = await connection.cursor()
            await cursor.execute("SELECT 1 FROM partitions WHERE name = ?", (name,))
            deleted = await cursor.fetchone() is not None
            await cursor.execute("DELETE FROM entries WHERE partition = ?", (name,))
            await cursor.execute("DELETE FROM partitions WHERE name = ?", (name,))
            await connection.commit()
        if deleted:
            logger.debug(f"Deleted partition {name}")
        return deleted

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
            self._initialized = False
