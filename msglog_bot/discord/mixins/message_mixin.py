from __future__ import annotations

import logging
from typing import Any

import discord

from ...errors import DuplicateKeyError, StoreError, describe_store_error
from ...logs.storage.codec import MessageRecord
from ...logs.storage.utils import LogTable
from ..common import attachment_urls, collapse_spaces, format_snipe

logger = logging.getLogger("msglog_bot")


class MessageMixin:
    """Translate gateway events into message-log store calls.

    Store failures are logged here and never escape into the event pipeline.
    """

    async def _log_new_message(self, message: discord.Message) -> bool:
        if message.guild is None:
            return False
        try:
            await self.log_store.insert_active(
                message_id=int(message.id),
                guild_id=int(message.guild.id),
                channel_id=int(message.channel.id),
                author_id=int(message.author.id),
                content=message.content or "",
                attachments=attachment_urls(message),
            )
        except DuplicateKeyError:
            logger.warning("Message %s is already in the active log", message.id)
            return False
        except (StoreError, ValueError) as exc:
            logger.error("Failed to log message %s: %s", message.id, describe_store_error(exc))
            return False
        return True

    async def _resolve_deleted_record(
        self,
        message_id: int,
        channel_id: int,
        guild_id: int | None,
        cached_message: Any = None,
    ) -> MessageRecord | None:
        records = await self.log_store.get_by_id(LogTable.ACTIVE, message_id)
        if records:
            return records[0]
        if cached_message is None or guild_id is None:
            return None
        return MessageRecord(
            message_id=int(message_id),
            guild_id=int(guild_id),
            channel_id=int(channel_id),
            author_id=int(cached_message.author.id),
            content=cached_message.content or "",
            attachments=attachment_urls(cached_message),
        )

    async def _log_deleted_message(
        self,
        message_id: int,
        channel_id: int,
        guild_id: int | None,
        cached_message: Any = None,
    ) -> bool:
        try:
            record = await self._resolve_deleted_record(message_id, channel_id, guild_id, cached_message)
            if record is None:
                logger.debug("Deleted message %s was never logged; skipping", message_id)
                return False
            await self.log_store.insert_record(LogTable.DELETED, record)
        except DuplicateKeyError:
            logger.warning("Message %s is already in the deleted log", message_id)
            return False
        except (StoreError, ValueError) as exc:
            logger.error("Failed to log deleted message %s: %s", message_id, describe_store_error(exc))
            return False
        logger.info("Deleted message %s logged for guild %s", message_id, record.guild_id)
        return True

    async def _log_edited_message(self, message_id: int, content: str | None) -> bool:
        if content is None:
            logger.debug("Edit of message %s carried no content", message_id)
            return False
        try:
            updated = await self.log_store.update_content(message_id, content)
        except StoreError as exc:
            logger.error("Failed to log edit of message %s: %s", message_id, describe_store_error(exc))
            return False
        if not updated:
            logger.debug("Edited message %s is not in the active log", message_id)
        return bool(updated)

    async def _try_handle_system_command(self, message: discord.Message) -> bool:
        raw = collapse_spaces(message.content or "")
        if not raw:
            return False
        prefix = self.settings.command_prefix.strip()
        if not prefix or not raw.startswith(prefix):
            return False

        command = raw[len(prefix) :].strip().lower()
        if command != "snipe":
            return False

        if message.guild is None:
            await message.reply(f"`{prefix}snipe` works only in a server.")
            return True

        try:
            records = await self.log_store.get_latest_for_guild(int(message.guild.id))
        except StoreError as exc:
            logger.error("Snipe lookup failed for guild %s: %s", message.guild.id, describe_store_error(exc))
            await message.reply("Could not read the deleted-message log. Check bot logs.")
            return True

        if not records:
            await message.reply("Nothing to snipe.")
            return True

        record = records[0]
        await message.reply(
            format_snipe(record.author_id, record.channel_id, record.content, record.attachments),
            allowed_mentions=discord.AllowedMentions.none(),
        )
        return True
