from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from msglog_bot.config import Settings  # noqa: E402


_ENV_KEYS = (
    "DISCORD_TOKEN",
    "DISCORD_COMMAND_PREFIX",
    "MESSAGE_LOG_BACKEND",
    "MESSAGE_LOG_CAPACITY",
    "MESSAGE_LOG_POSTGRES_DSN",
    "DATABASE_URL",
    "DB_HOST",
    "DB_USER",
    "DB_PW",
    "DB_PASSWORD",
    "MESSAGE_LOG_POOL_MIN_SIZE",
    "MESSAGE_LOG_POOL_MAX_SIZE",
    "MESSAGE_LOG_SQLITE_PATH",
    "MESSAGE_LOG_SQLITE_BUSY_TIMEOUT_MS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_match_original_deployment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DISCORD_TOKEN", "token")

    settings = Settings.from_env()
    settings.validate()

    assert settings.message_log_backend == "postgres"
    assert settings.message_log_capacity == 1000
    assert (settings.db_host, settings.db_user) == ("localhost", "postgres")
    assert settings.command_prefix == "-"


def test_token_is_cleaned_and_password_alias_is_read(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DISCORD_TOKEN", ' "Bot abc.def" ')
    clean_env.setenv("DB_PASSWORD", "hunter2")

    settings = Settings.from_env()

    assert settings.discord_token == "abc.def"
    assert settings.db_password == "hunter2"


def test_invalid_numbers_fall_back_to_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("MESSAGE_LOG_CAPACITY", "lots")

    assert Settings.from_env().message_log_capacity == 1000


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("MESSAGE_LOG_BACKEND", "mysql", "MESSAGE_LOG_BACKEND"),
        ("MESSAGE_LOG_CAPACITY", "0", "MESSAGE_LOG_CAPACITY"),
        ("MESSAGE_LOG_POSTGRES_DSN", "host=localhost user=postgres", "MESSAGE_LOG_POSTGRES_DSN"),
        ("MESSAGE_LOG_POOL_MAX_SIZE", "0", "MESSAGE_LOG_POOL_MAX_SIZE"),
        ("MESSAGE_LOG_SQLITE_BUSY_TIMEOUT_MS", "120000", "BUSY_TIMEOUT"),
    ],
)
def test_validate_rejects_bad_values(clean_env: pytest.MonkeyPatch, key: str, value: str, message: str) -> None:
    clean_env.setenv("DISCORD_TOKEN", "token")
    clean_env.setenv(key, value)

    with pytest.raises(ValueError, match=message):
        Settings.from_env().validate()


def test_validate_requires_token(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValueError, match="DISCORD_TOKEN"):
        Settings.from_env().validate()
