from __future__ import annotations

from .pool import LogPool
from .storage.messages import DEFAULT_LOG_CAPACITY, LogMessagesMixin
from .storage.schema import LogSchemaMixin


class MessageLogStore(
    LogSchemaMixin,
    LogMessagesMixin,
):
    """Bounded message log over an injected connection pool."""

    def __init__(self, pool: LogPool, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        if int(capacity) < 1:
            raise ValueError("message log capacity must be >= 1")
        self.pool = pool
        self.capacity = int(capacity)
        self._init_schema_state()

    @property
    def backend_name(self) -> str:
        return self.pool.backend_name

    async def ping(self) -> None:
        await self.pool.ping()

    async def close(self) -> None:
        await self.pool.close()
