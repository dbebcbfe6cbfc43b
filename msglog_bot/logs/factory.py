from __future__ import annotations

from ..config import Settings
from .pool import LogPool, PostgresLogPool, SqliteLogPool
from .store import MessageLogStore


async def open_log_pool(settings: Settings) -> LogPool:
    backend = settings.message_log_backend
    if backend == "sqlite":
        return await SqliteLogPool.open(
            settings.sqlite_path,
            max_size=settings.pool_max_size,
            busy_timeout_ms=settings.sqlite_busy_timeout_ms,
        )
    if backend != "postgres":
        raise ValueError("MESSAGE_LOG_BACKEND must be 'sqlite' or 'postgres'")

    if settings.postgres_dsn:
        return await PostgresLogPool.open(
            settings.postgres_dsn,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            command_timeout=settings.command_timeout_seconds,
        )
    return await PostgresLogPool.open(
        host=settings.db_host,
        user=settings.db_user,
        password=settings.db_password,
        database=settings.db_name,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        command_timeout=settings.command_timeout_seconds,
    )


async def build_log_store(settings: Settings) -> MessageLogStore:
    pool = await open_log_pool(settings)
    return MessageLogStore(pool, capacity=settings.message_log_capacity)
