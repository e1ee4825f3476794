from __future__ import annotations

import argparse
import secrets
import sys
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence

from dotenv import set_key

from .app import create_bot
from .client import BotApi, TelegramError
from .commands import default_commands
from .config import BotSettings
from .registry import CommandRegistry

_INFO_FIELDS = (
    ("url", "URL"),
    ("has_custom_certificate", "Custom Certificate"),
    ("pending_update_count", "Pending Updates"),
    ("ip_address", "IP Address"),
    ("last_error_date", "Last Error Date"),
    ("last_error_message", "Last Error Message"),
    ("max_connections", "Max Connections"),
    ("allowed_updates", "Allowed Updates"),
)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skybot", description="Telegram webhook bot")
    parser.add_argument("--env-file", default=".env", help="dotenv file to read settings from")
    sub = parser.add_subparsers(dest="cmd", required=True)

    serve = sub.add_parser("serve", help="run the webhook server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    wh = sub.add_parser("webhook", help="manage the Telegram webhook")
    wh.add_argument("action", choices=("set", "delete", "info", "drop-pending"))

    sub.add_parser("commands", help="register the command list with BotFather")
    return parser


def _out(line: str) -> None:
    print(line, flush=True)


def webhook_set(bot: BotApi, settings: BotSettings, env_file: str) -> int:
    if not settings.token:
        _out("  ✗ TELEGRAM_BOT_TOKEN is not set in .env")
        return 1
    if not settings.webhook_url:
        _out("  ✗ TELEGRAM_DOMAIN is not set in .env")
        return 1
    secret = settings.webhook_secret
    if not secret:
        secret = secrets.token_hex(32)
        set_key(env_file, "TELEGRAM_WEBHOOK_SECRET", secret)
        _out("  ✓ Generated new secret token and saved to .env")
    if bot.set_webhook(settings.webhook_url, secret_token=secret):
        _out("  ✓ Set Webhook: Success")
        _out(f"    URL: {settings.webhook_url}")
        return 0
    _out("  ✗ Set Webhook: Failed")
    return 1


def webhook_delete(bot: BotApi, drop_pending: bool = False) -> int:
    label = "Drop Pending Updates" if drop_pending else "Delete Webhook"
    ok = bot.delete_webhook(drop_pending_updates=drop_pending)
    _out(f"  {'✓' if ok else '✗'} {label}: {'Success' if ok else 'Failed'}")
    return 0 if ok else 1


def webhook_info(bot: BotApi) -> int:
    info = bot.get_webhook_info() or {}
    _out("Webhook Info:")
    for key, label in _INFO_FIELDS:
        value = info.get(key)
        if value is None:
            continue
        if key == "last_error_date":
            value = datetime.fromtimestamp(value).strftime("%Y-%m-%d %H:%M:%S")
        elif isinstance(value, bool):
            value = "Yes" if value else "No"
        elif isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        _out(f"  {label}: {value}")
    return 0


def register_commands(bot: BotApi) -> int:
    table = CommandRegistry(default_commands()).bot_commands()
    ok = bot.set_my_commands(table)
    _out(f"  {'✓' if ok else '✗'} Registered {len(table)} commands")
    return 0 if ok else 1


def serve(settings: BotSettings, host: str, port: int) -> int:
    import uvicorn

    from .app import create_app

    uvicorn.run(create_app(settings), host=host, port=port)
    return 0


def main(argv: Optional[Sequence[str]] = None, settings: Optional[BotSettings] = None,
         bot: Optional[BotApi] = None) -> int:
    args = build_cli_parser().parse_args(argv)
    settings = settings or BotSettings.from_env(dotenv_path=args.env_file)

    if args.cmd == "serve":
        return serve(settings, args.host, args.port)

    if not settings.token:
        _out("  ✗ TELEGRAM_BOT_TOKEN is not set in .env")
        return 1
    bot = bot or create_bot(settings)
    actions: Dict[str, Callable[[], int]] = {
        "set": lambda: webhook_set(bot, settings, args.env_file),
        "delete": lambda: webhook_delete(bot),
        "drop-pending": lambda: webhook_delete(bot, drop_pending=True),
        "info": lambda: webhook_info(bot),
    }
    try:
        if args.cmd == "commands":
            return register_commands(bot)
        return actions[args.action]()
    except TelegramError as e:
        _out(f"  ✗ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
