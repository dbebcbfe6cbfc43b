from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional

import aiosqlite
import asyncpg

from ..errors import BackendError, DuplicateKeyError, PoolConnectionError, StoreError
from .storage.utils import _clamp, _rows_affected, _sqlite_log_connection, _sqlite_placeholders


logger = logging.getLogger("msglog_bot")


class LogConnection:
    """Backend-neutral handle yielded by ``LogPool.acquire()``.

    SQL is written with asyncpg-style ``$n`` placeholders.
    """

    async def execute(self, sql: str, *args: Any) -> int:
        raise NotImplementedError

    async def fetch(self, sql: str, *args: Any) -> List[Any]:
        raise NotImplementedError

    async def fetchrow(self, sql: str, *args: Any) -> Optional[Any]:
        rows = await self.fetch(sql, *args)
        return rows[0] if rows else None

    async def fetchval(self, sql: str, *args: Any) -> Any:
        row = await self.fetchrow(sql, *args)
        if row is None:
            return None
        return row[0]

    def transaction(self) -> Any:
        raise NotImplementedError

    async def lock_table(self, table: str) -> None:
        """Serialize writers on ``table`` until the current transaction ends."""
        raise NotImplementedError


class PostgresLogConnection(LogConnection):
    def __init__(self, conn: "asyncpg.Connection") -> None:
        self._conn = conn

    async def execute(self, sql: str, *args: Any) -> int:
        status = await self._conn.execute(sql, *args)
        return _rows_affected(status)

    async def fetch(self, sql: str, *args: Any) -> List[Any]:
        return list(await self._conn.fetch(sql, *args))

    async def fetchrow(self, sql: str, *args: Any) -> Optional[Any]:
        return await self._conn.fetchrow(sql, *args)

    async def fetchval(self, sql: str, *args: Any) -> Any:
        return await self._conn.fetchval(sql, *args)

    def transaction(self) -> Any:
        return self._conn.transaction()

    async def lock_table(self, table: str) -> None:
        await self._conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", table)


class SqliteLogConnection(LogConnection):
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def execute(self, sql: str, *args: Any) -> int:
        cursor = await self._db.execute(_sqlite_placeholders(sql), args)
        try:
            return max(0, int(cursor.rowcount))
        finally:
            await cursor.close()

    async def fetch(self, sql: str, *args: Any) -> List[Any]:
        async with self._db.execute(_sqlite_placeholders(sql), args) as cursor:
            rows = await cursor.fetchall()
        return list(rows)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # IMMEDIATE takes the write lock up front, so concurrent writers queue
        # on busy_timeout instead of failing at commit.
        await self._db.execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            try:
                await self._db.execute("ROLLBACK")
            except (sqlite3.Error, ValueError) as rollback_exc:
                logger.warning("SQLite rollback failed: %s", rollback_exc)
            raise
        await self._db.execute("COMMIT")

    async def lock_table(self, table: str) -> None:
        return None


class LogPool:
    backend_name = "unknown"

    def acquire(self) -> Any:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    async def ping(self) -> None:
        async with self.acquire() as conn:
            await conn.fetchval("SELECT 1")


class PostgresLogPool(LogPool):
    backend_name = "postgres"

    def __init__(self, pool: "asyncpg.Pool") -> None:
        self._pool: "asyncpg.Pool | None" = pool

    @classmethod
    async def open(
        cls,
        dsn: str | None = None,
        *,
        host: str | None = None,
        user: str | None = None,
        password: str | None = None,
        database: str | None = None,
        min_size: int = 1,
        max_size: int = 6,
        command_timeout: float = 30.0,
    ) -> "PostgresLogPool":
        max_size = max(1, int(max_size))
        min_size = _clamp(int(min_size), 0, max_size)
        try:
            pool = await asyncpg.create_pool(
                dsn=(dsn or "").strip() or None,
                host=host or None,
                user=user or None,
                password=password or None,
                database=database or None,
                min_size=min_size,
                max_size=max_size,
                command_timeout=command_timeout,
            )
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise PoolConnectionError(f"could not open Postgres pool: {exc}") from exc

        log_pool = cls(pool)
        try:
            await log_pool.ping()
        except StoreError:
            await log_pool.close()
            raise
        logger.info("Postgres message-log pool ready (min_size=%s max_size=%s)", min_size, max_size)
        return log_pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[PostgresLogConnection]:
        if self._pool is None:
            raise PoolConnectionError("Postgres pool is closed")
        try:
            async with self._pool.acquire() as conn:
                yield PostgresLogConnection(conn)
        except StoreError:
            raise
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateKeyError(str(exc)) from exc
        except (
            OSError,
            asyncpg.PostgresConnectionError,
            asyncpg.InvalidAuthorizationSpecificationError,
            asyncpg.InvalidCatalogNameError,
        ) as exc:
            raise PoolConnectionError(str(exc)) from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as exc:
            raise BackendError(str(exc) or type(exc).__name__) from exc

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None


class SqliteLogPool(LogPool):
    """aiosqlite backend: one connection per acquire, bounded by a semaphore."""

    backend_name = "sqlite"

    def __init__(self, db_path: str | Path, *, max_size: int = 6, busy_timeout_ms: int = 5000) -> None:
        self.db_path = Path(db_path)
        self.max_size = max(1, int(max_size))
        self.busy_timeout_ms = _clamp(int(busy_timeout_ms), 0, 60000)
        self._slots = asyncio.Semaphore(self.max_size)
        self._closed = False

    @classmethod
    async def open(
        cls,
        db_path: str | Path,
        *,
        max_size: int = 6,
        busy_timeout_ms: int = 5000,
    ) -> "SqliteLogPool":
        log_pool = cls(db_path, max_size=max_size, busy_timeout_ms=busy_timeout_ms)
        try:
            log_pool.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PoolConnectionError(f"cannot create SQLite directory {log_pool.db_path.parent}: {exc}") from exc
        async with log_pool.acquire() as conn:
            await conn.fetchval("PRAGMA journal_mode=WAL")
        logger.info("SQLite message-log pool ready (%s)", log_pool.db_path)
        return log_pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[SqliteLogConnection]:
        if self._closed:
            raise PoolConnectionError("SQLite pool is closed")
        async with self._slots:
            try:
                async with _sqlite_log_connection(self.db_path, self.busy_timeout_ms) as db:
                    yield SqliteLogConnection(db)
            except StoreError:
                raise
            except sqlite3.IntegrityError as exc:
                if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                    raise DuplicateKeyError(str(exc)) from exc
                raise BackendError(str(exc)) from exc
            except sqlite3.OperationalError as exc:
                if "unable to open" in str(exc):
                    raise PoolConnectionError(str(exc)) from exc
                raise BackendError(str(exc)) from exc
            except sqlite3.Error as exc:
                raise BackendError(str(exc)) from exc

    async def close(self) -> None:
        self._closed = True
