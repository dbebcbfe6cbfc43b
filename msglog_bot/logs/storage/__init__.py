from .codec import MessageRecord, decode_attachments, decode_record, encode_attachments, encode_record
from .messages import DEFAULT_LOG_CAPACITY, LogMessagesMixin
from .schema import LogSchemaMixin, ensure_schema
from .utils import LogTable

__all__ = [
    "DEFAULT_LOG_CAPACITY",
    "LogMessagesMixin",
    "LogSchemaMixin",
    "LogTable",
    "MessageRecord",
    "decode_attachments",
    "decode_record",
    "encode_attachments",
    "encode_record",
    "ensure_schema",
]
