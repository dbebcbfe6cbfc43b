from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


def _env_lookup(name: str, aliases: tuple[str, ...] = ()) -> str | None:
    for key in (name, *aliases):
        # Be tolerant to UTF-8 BOM accidentally saved in .env key names.
        for candidate in (key, f"\ufeff{key}"):
            raw = os.getenv(candidate)
            if raw is not None:
                return raw
    return None


def _env_bool(name: str, default: bool, aliases: tuple[str, ...] = ()) -> bool:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, aliases: tuple[str, ...] = ()) -> int:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float, aliases: tuple[str, ...] = ()) -> float:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _clean_token(value: str) -> str:
    cleaned = value.strip()
    if cleaned.lower().startswith("bot "):
        cleaned = cleaned[4:].strip()
    if (cleaned.startswith('"') and cleaned.endswith('"')) or (
        cleaned.startswith("'") and cleaned.endswith("'")
    ):
        cleaned = cleaned[1:-1].strip()
    return cleaned


def _env_str(name: str, default: str, aliases: tuple[str, ...] = ()) -> str:
    raw = _env_lookup(name, aliases)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


_BACKENDS = {"postgres", "sqlite"}


@dataclass(slots=True)
class Settings:
    discord_token: str
    command_prefix: str
    discord_message_content_intent: bool
    log_level: str

    message_log_backend: str
    message_log_capacity: int

    postgres_dsn: str
    db_host: str
    db_user: str
    db_password: str
    db_name: str
    pool_min_size: int
    pool_max_size: int
    command_timeout_seconds: float

    sqlite_path: Path
    sqlite_busy_timeout_ms: int

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            discord_token=_clean_token(_env_lookup("DISCORD_TOKEN") or ""),
            command_prefix=_env_str("DISCORD_COMMAND_PREFIX", "-"),
            discord_message_content_intent=_env_bool("DISCORD_MESSAGE_CONTENT_INTENT", True),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            message_log_backend=_env_str("MESSAGE_LOG_BACKEND", "postgres").lower(),
            message_log_capacity=_env_int("MESSAGE_LOG_CAPACITY", 1000),
            postgres_dsn=_env_str("MESSAGE_LOG_POSTGRES_DSN", "", aliases=("DATABASE_URL",)),
            db_host=_env_str("DB_HOST", "localhost"),
            db_user=_env_str("DB_USER", "postgres"),
            db_password=_env_str("DB_PW", "", aliases=("DB_PASSWORD",)),
            db_name=_env_str("DB_NAME", ""),
            pool_min_size=_env_int("MESSAGE_LOG_POOL_MIN_SIZE", 1),
            pool_max_size=_env_int("MESSAGE_LOG_POOL_MAX_SIZE", 6),
            command_timeout_seconds=_env_float("MESSAGE_LOG_COMMAND_TIMEOUT_SECONDS", 30.0),
            sqlite_path=Path(_env_str("MESSAGE_LOG_SQLITE_PATH", "./data/message_logs.db")).expanduser(),
            sqlite_busy_timeout_ms=_env_int("MESSAGE_LOG_SQLITE_BUSY_TIMEOUT_MS", 5000),
        )

    def validate(self) -> None:
        if not self.discord_token:
            raise ValueError("DISCORD_TOKEN is required")
        if self.discord_token == "put_your_discord_bot_token_here":
            raise ValueError("DISCORD_TOKEN is still placeholder")
        if not self.command_prefix.strip():
            raise ValueError("DISCORD_COMMAND_PREFIX cannot be empty")

        if self.message_log_backend not in _BACKENDS:
            raise ValueError("MESSAGE_LOG_BACKEND must be 'postgres' or 'sqlite'")
        if self.message_log_capacity < 1:
            raise ValueError("MESSAGE_LOG_CAPACITY must be >= 1")

        if self.postgres_dsn and not self.postgres_dsn.startswith(("postgres://", "postgresql://")):
            raise ValueError("MESSAGE_LOG_POSTGRES_DSN must be a postgres:// or postgresql:// URI")
        if self.pool_max_size < 1:
            raise ValueError("MESSAGE_LOG_POOL_MAX_SIZE must be >= 1")
        if self.pool_min_size < 0 or self.pool_min_size > self.pool_max_size:
            raise ValueError("MESSAGE_LOG_POOL_MIN_SIZE must be in [0, MESSAGE_LOG_POOL_MAX_SIZE]")
        if self.command_timeout_seconds <= 0:
            raise ValueError("MESSAGE_LOG_COMMAND_TIMEOUT_SECONDS must be > 0")

        if self.sqlite_busy_timeout_ms < 0 or self.sqlite_busy_timeout_ms > 60000:
            raise ValueError("MESSAGE_LOG_SQLITE_BUSY_TIMEOUT_MS must be in [0, 60000]")
