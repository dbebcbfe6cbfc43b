from __future__ import annotations

import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite


_PLACEHOLDER_RE = re.compile(r"\$(\d+)")


class LogTable:
    ACTIVE = "active_messages"
    DELETED = "deleted_messages"

    ALL = (ACTIVE, DELETED)


def resolve_table(name: str) -> str:
    table = str(name or "").strip()
    if table not in LogTable.ALL:
        raise ValueError(f"unknown log table {name!r}; expected one of {', '.join(LogTable.ALL)}")
    return table


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _sqlite_placeholders(sql: str) -> str:
    # $1 -> ?1: SQLite numbered parameters keep the asyncpg argument order.
    return _PLACEHOLDER_RE.sub(r"?\1", sql)


def _rows_affected(status: str) -> int:
    # asyncpg status tags look like "UPDATE 3" or "INSERT 0 1".
    tail = str(status or "").rsplit(" ", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


@asynccontextmanager
async def _sqlite_log_connection(db_path: str | Path, busy_timeout_ms: int) -> AsyncIterator[aiosqlite.Connection]:
    async with aiosqlite.connect(db_path, isolation_level=None) as db:
        db.row_factory = aiosqlite.Row
        timeout_ms = _clamp(int(busy_timeout_ms), 0, 60000)
        if timeout_ms > 0:
            await db.execute(f"PRAGMA busy_timeout={timeout_ms}")
        yield db
