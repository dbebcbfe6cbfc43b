from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from msglog_bot.errors import MalformedRowError  # noqa: E402
from msglog_bot.logs.storage.codec import (  # noqa: E402
    MessageRecord,
    decode_attachments,
    decode_record,
    encode_attachments,
    encode_record,
)


def _row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "message_id": 1185000000000000001,
        "guild_id": 900000000000000001,
        "channel_id": 900000000000000002,
        "author_id": 900000000000000003,
        "content": "hello",
        "attachments": "a.png,b.png",
    }
    row.update(overrides)
    return row


def test_attachments_encode_to_comma_joined_string() -> None:
    assert encode_attachments(["a.png", "b.png"]) == "a.png,b.png"
    assert encode_attachments([]) == ""


def test_empty_string_decodes_to_empty_list() -> None:
    assert decode_attachments("") == []
    assert decode_attachments("a.png,b.png") == ["a.png", "b.png"]


def test_attachment_lists_round_trip_through_storage_value() -> None:
    urls = [
        "https://cdn.discordapp.com/attachments/1/2/cat.png",
        "https://cdn.discordapp.com/attachments/1/3/notes.txt?ex=65&is=66",
    ]
    assert decode_attachments(encode_attachments(urls)) == urls
    assert encode_attachments(decode_attachments("x.gif")) == "x.gif"


def test_attachment_with_delimiter_or_empty_reference_is_rejected() -> None:
    with pytest.raises(ValueError, match="contains"):
        encode_attachments(["a,b.png"])
    with pytest.raises(ValueError, match="empty"):
        encode_attachments(["a.png", ""])


def test_decode_record_builds_message_record() -> None:
    record = decode_record(_row())

    assert record == MessageRecord(
        message_id=1185000000000000001,
        guild_id=900000000000000001,
        channel_id=900000000000000002,
        author_id=900000000000000003,
        content="hello",
        attachments=["a.png", "b.png"],
    )


def test_decode_record_reports_missing_column() -> None:
    row = _row()
    del row["channel_id"]

    with pytest.raises(MalformedRowError) as excinfo:
        decode_record(row)
    assert excinfo.value.column == "channel_id"


@pytest.mark.parametrize(
    ("column", "value"),
    [
        ("guild_id", "900"),
        ("author_id", True),
        ("content", None),
        ("attachments", 5),
    ],
)
def test_decode_record_rejects_wrong_column_shapes(column: str, value: object) -> None:
    with pytest.raises(MalformedRowError) as excinfo:
        decode_record(_row(**{column: value}))
    assert excinfo.value.column == column


def test_encode_record_orders_parameters_like_table_columns() -> None:
    record = MessageRecord(message_id=4, guild_id=1, channel_id=2, author_id=3, content="", attachments=[])

    assert encode_record(record) == (4, 1, 2, 3, "", "")


def test_encode_record_rejects_ids_outside_bigint_range() -> None:
    record = MessageRecord(message_id=2**63, guild_id=1, channel_id=2, author_id=3)

    with pytest.raises(ValueError, match="64-bit"):
        encode_record(record)
