from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...errors import SchemaError, StoreError
from .utils import LogTable

if TYPE_CHECKING:
    from ..pool import LogPool


logger = logging.getLogger("msglog_bot")


def _log_table_ddl(table: str) -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {table} (
            message_id BIGINT PRIMARY KEY,
            guild_id BIGINT,
            channel_id BIGINT,
            author_id BIGINT,
            content TEXT,
            attachments TEXT
        )
        """


SCHEMA_STATEMENTS = (
    _log_table_ddl(LogTable.ACTIVE),
    _log_table_ddl(LogTable.DELETED),
    """
    CREATE INDEX IF NOT EXISTS idx_deleted_messages_guild_latest
    ON deleted_messages(guild_id, message_id DESC)
    """,
)


async def ensure_schema(pool: "LogPool") -> None:
    """Create both log tables if absent. Never drops or alters existing data."""
    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                for statement in SCHEMA_STATEMENTS:
                    await conn.execute(statement)
    except StoreError as exc:
        raise SchemaError(f"could not initialize message-log schema ({pool.backend_name}): {exc}") from exc
    logger.info("Message-log tables ready (%s)", ", ".join(LogTable.ALL))


class LogSchemaMixin:
    pool: "LogPool"

    def _init_schema_state(self) -> None:
        self._init_lock = asyncio.Lock()
        self._initialized = False

    async def init(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return
            await ensure_schema(self.pool)
            self._initialized = True
