from .pool import LogPool, PostgresLogPool, SqliteLogPool
from .storage import LogTable, MessageRecord, ensure_schema
from .store import MessageLogStore

__all__ = [
    "LogPool",
    "LogTable",
    "MessageLogStore",
    "MessageRecord",
    "PostgresLogPool",
    "SqliteLogPool",
    "ensure_schema",
]
