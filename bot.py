import sys

from msglog_bot.app import main


if __name__ == "__main__":
    try:
        main()
    except ValueError as exc:
        text = str(exc)
        if text.startswith(("DISCORD_", "MESSAGE_LOG_")):
            print(f"Config error: {text}", file=sys.stderr)
            print("Fill DISCORD_TOKEN and the MESSAGE_LOG_* / DB_* settings in .env.", file=sys.stderr)
            raise SystemExit(2)
        raise
