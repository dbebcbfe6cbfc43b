from __future__ import annotations

import asyncio
import logging

import discord

from ..config import Settings
from ..logs.store import MessageLogStore
from .mixins.message_mixin import MessageMixin

logger = logging.getLogger("msglog_bot")


class MessageLogDiscordBot(
    MessageMixin,
    discord.Client,
):
    def __init__(
        self,
        settings: Settings,
        log_store: MessageLogStore,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = settings.discord_message_content_intent
        intents.messages = True
        intents.guilds = True

        super().__init__(intents=intents)

        self.settings = settings
        self.log_store = log_store

    async def setup_hook(self) -> None:
        await self.log_store.init()
        logger.info(
            "Message log store initialized (backend=%s capacity=%s)",
            self.log_store.backend_name,
            self.log_store.capacity,
        )

    async def close(self) -> None:
        await self._run_shutdown_step("discord.Client.close", super().close(), timeout=6.0)
        await self._run_shutdown_step("log_store.close", self.log_store.close(), timeout=6.0)

    async def _run_shutdown_step(self, label: str, coro: object, *, timeout: float) -> None:
        try:
            await asyncio.wait_for(coro, timeout=timeout)  # type: ignore[arg-type]
        except asyncio.TimeoutError:
            logger.warning("Shutdown step timed out: %s", label)
        except Exception as exc:
            logger.warning("Shutdown step failed: %s (%s)", label, exc)

    async def on_ready(self) -> None:
        if self.user:
            logger.info("Connected as %s (%s)", self.user, self.user.id)

    async def on_message(self, message: discord.Message) -> None:
        logger.debug("Message from %s: %s", message.author, message.content)
        await self._log_new_message(message)
        await self._try_handle_system_command(message)

    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent) -> None:
        logger.info("Message %s deleted in guild %s", payload.message_id, payload.guild_id)
        await self._log_deleted_message(
            message_id=payload.message_id,
            channel_id=payload.channel_id,
            guild_id=payload.guild_id,
            cached_message=payload.cached_message,
        )

    async def on_raw_message_edit(self, payload: discord.RawMessageUpdateEvent) -> None:
        content = (payload.data or {}).get("content")
        logger.debug("Message %s edited", payload.message_id)
        await self._log_edited_message(payload.message_id, content)
