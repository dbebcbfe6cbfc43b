from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Tuple

from ...errors import MalformedRowError


ATTACHMENT_DELIMITER = ","

RECORD_COLUMNS = (
    "message_id",
    "guild_id",
    "channel_id",
    "author_id",
    "content",
    "attachments",
)

_ID_COLUMNS = ("message_id", "guild_id", "channel_id", "author_id")
_TEXT_COLUMNS = ("content", "attachments")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(slots=True)
class MessageRecord:
    message_id: int
    guild_id: int
    channel_id: int
    author_id: int
    content: str = ""
    attachments: List[str] = field(default_factory=list)


def encode_attachments(attachments: Iterable[str]) -> str:
    """Join attachment references into the stored column value.

    References must be non-empty and must not contain the delimiter, otherwise
    the stored value would not split back into the same list.
    """
    items: List[str] = []
    for item in attachments:
        value = str(item)
        if not value:
            raise ValueError("attachment reference cannot be empty")
        if ATTACHMENT_DELIMITER in value:
            raise ValueError(f"attachment reference contains {ATTACHMENT_DELIMITER!r}: {value[:120]}")
        items.append(value)
    return ATTACHMENT_DELIMITER.join(items)


def decode_attachments(raw: str) -> List[str]:
    if not raw:
        return []
    return raw.split(ATTACHMENT_DELIMITER)


def _check_int64(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < _INT64_MIN or value > _INT64_MAX:
        raise ValueError(f"{name} is out of the signed 64-bit range: {value}")
    return value


def encode_record(record: MessageRecord) -> Tuple[int, int, int, int, str, str]:
    """Parameter tuple in RECORD_COLUMNS order."""
    return (
        _check_int64("message_id", record.message_id),
        _check_int64("guild_id", record.guild_id),
        _check_int64("channel_id", record.channel_id),
        _check_int64("author_id", record.author_id),
        str(record.content or ""),
        encode_attachments(record.attachments),
    )


def _column(row: Mapping[str, Any], name: str) -> Any:
    try:
        return row[name]
    except (KeyError, IndexError) as exc:
        raise MalformedRowError(f"row is missing column {name!r}", column=name) from exc


def decode_record(row: Mapping[str, Any]) -> MessageRecord:
    values: dict[str, Any] = {}
    for name in _ID_COLUMNS:
        value = _column(row, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedRowError(
                f"column {name!r} must be an integer, got {type(value).__name__}",
                column=name,
            )
        values[name] = value
    for name in _TEXT_COLUMNS:
        value = _column(row, name)
        if not isinstance(value, str):
            raise MalformedRowError(
                f"column {name!r} must be text, got {type(value).__name__}",
                column=name,
            )
        values[name] = value

    return MessageRecord(
        message_id=values["message_id"],
        guild_id=values["guild_id"],
        channel_id=values["channel_id"],
        author_id=values["author_id"],
        content=values["content"],
        attachments=decode_attachments(values["attachments"]),
    )
