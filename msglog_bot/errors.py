from __future__ import annotations


class StoreError(Exception):
    """Base error for message-log storage failures."""


class PoolConnectionError(StoreError, ConnectionError):
    """Backend unreachable, credentials rejected or connection lost. Safe to retry with backoff."""


class SchemaError(StoreError):
    """Log tables could not be created. Fatal at startup."""


class DuplicateKeyError(StoreError):
    """Insert of a message_id that is already present in the target table."""


class MalformedRowError(StoreError):
    """A stored row does not match the expected column layout."""

    def __init__(self, message: str, *, column: str | None = None) -> None:
        super().__init__(message)
        self.column = column


class BackendError(StoreError):
    pass


def describe_store_error(error: BaseException) -> str:
    """Short one-line label for log output."""
    kind = type(error).__name__
    text = str(error).split("\n", 1)[0].strip()
    if not text:
        return kind
    return f"{kind}: {text[:160]}"
