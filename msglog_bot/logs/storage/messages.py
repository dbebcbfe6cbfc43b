from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List

from .codec import MessageRecord, decode_record, encode_record
from .utils import LogTable, resolve_table

if TYPE_CHECKING:
    from ..pool import LogConnection, LogPool


logger = logging.getLogger("msglog_bot")

DEFAULT_LOG_CAPACITY = 1000

_SELECT_COLUMNS = "message_id, guild_id, channel_id, author_id, content, attachments"


class LogMessagesMixin:
    """Capacity-bounded append logs for observed and deleted messages.

    Every insert runs in one transaction: insert, count, evict the lowest
    message ids beyond ``capacity``, commit. Writers on the same table are
    serialized by the backend, so the bound holds under concurrent inserts.
    """

    pool: "LogPool"
    capacity: int

    async def insert_active(
        self,
        message_id: int,
        guild_id: int,
        channel_id: int,
        author_id: int,
        content: str,
        attachments: Iterable[str] = (),
    ) -> int:
        record = MessageRecord(
            message_id=message_id,
            guild_id=guild_id,
            channel_id=channel_id,
            author_id=author_id,
            content=content,
            attachments=list(attachments),
        )
        return await self.insert_record(LogTable.ACTIVE, record)

    async def insert_deleted(
        self,
        message_id: int,
        guild_id: int,
        channel_id: int,
        author_id: int,
        content: str,
        attachments: Iterable[str] = (),
    ) -> int:
        record = MessageRecord(
            message_id=message_id,
            guild_id=guild_id,
            channel_id=channel_id,
            author_id=author_id,
            content=content,
            attachments=list(attachments),
        )
        return await self.insert_record(LogTable.DELETED, record)

    async def insert_record(self, table: str, record: MessageRecord) -> int:
        """Insert ``record`` and trim ``table`` back to capacity. Returns evicted row count."""
        table = resolve_table(table)
        params = encode_record(record)
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.lock_table(table)
                await conn.execute(
                    f"""
                    INSERT INTO {table} (
                        message_id, guild_id, channel_id, author_id, content, attachments
                    )
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    *params,
                )
                evicted = await self._evict_overflow(conn, table)

        if evicted:
            logger.debug(
                "Evicted %s row(s) from %s after inserting message %s (capacity=%s)",
                evicted,
                table,
                record.message_id,
                self.capacity,
            )
        return evicted

    async def _evict_overflow(self, conn: "LogConnection", table: str) -> int:
        """Delete the lowest ids until ``table`` is back at capacity.

        At steady state that is one row. After capacity is lowered between runs
        the whole overflow goes in a single statement.
        """
        row_count = int(await conn.fetchval(f"SELECT COUNT(*) FROM {table}") or 0)
        overflow = row_count - self.capacity
        if overflow <= 0:
            return 0
        return await conn.execute(
            f"""
            DELETE FROM {table}
            WHERE message_id IN (
                SELECT message_id
                FROM {table}
                ORDER BY message_id ASC
                LIMIT $1
            )
            """,
            overflow,
        )

    async def get_by_id(self, table: str, message_id: int) -> List[MessageRecord]:
        table = resolve_table(table)
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM {table}
                WHERE message_id = $1
                """,
                int(message_id),
            )
            return [decode_record(row) for row in rows]

    async def get_latest_for_guild(self, guild_id: int) -> List[MessageRecord]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM {LogTable.DELETED}
                WHERE guild_id = $1
                ORDER BY message_id DESC
                LIMIT 1
                """,
                int(guild_id),
            )
            return [decode_record(row) for row in rows]

    async def update_content(self, message_id: int, new_content: str) -> int:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                return await conn.execute(
                    f"""
                    UPDATE {LogTable.ACTIVE}
                    SET content = $1
                    WHERE message_id = $2
                    """,
                    str(new_content or ""),
                    int(message_id),
                )

    async def count(self, table: str) -> int:
        table = resolve_table(table)
        async with self.pool.acquire() as conn:
            value = await conn.fetchval(f"SELECT COUNT(*) FROM {table}")
        return int(value or 0)
