from __future__ import annotations

import asyncio
import contextlib
import logging

from .config import Settings
from .discord.client import MessageLogDiscordBot
from .errors import PoolConnectionError, SchemaError
from .logs.factory import build_log_store
from .logs.store import MessageLogStore

logger = logging.getLogger("msglog_bot")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.client").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)


def build_bot(settings: Settings, log_store: MessageLogStore) -> MessageLogDiscordBot:
    return MessageLogDiscordBot(settings=settings, log_store=log_store)


async def _run_bot(settings: Settings) -> None:
    log_store = await build_log_store(settings)
    bot = build_bot(settings, log_store)
    try:
        async with bot:
            await bot.start(settings.discord_token)
    finally:
        if not bot.is_closed():
            with contextlib.suppress(Exception):
                await asyncio.wait_for(bot.close(), timeout=10.0)
        await log_store.close()


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    settings.validate()
    try:
        asyncio.run(_run_bot(settings))
    except KeyboardInterrupt:
        logger.info("Shutdown requested, exiting.")
    except PoolConnectionError as exc:
        logger.error("Message log backend is unreachable: %s", exc)
        raise SystemExit(1) from exc
    except SchemaError as exc:
        logger.error("Message log schema initialization failed: %s", exc)
        raise SystemExit(1) from exc
