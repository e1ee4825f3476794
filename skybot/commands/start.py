from __future__ import annotations

import html

from ..command import Command
from ..context import Context


def handle_start(ctx: Context) -> None:
    if ctx.is_callback_query:
        ctx.answer_callback()

    sender = ctx.sender
    fallback = (sender.first_name if sender and sender.first_name else "there")
    name = html.escape(ctx.argument("referral", fallback))
    ctx.reply_with_keyboard(
        f"👋 Hello, <b>{name}</b>!\n\nWelcome to the bot. Use /help to see available commands.",
        [[("📖 Help", "help"), ("⚙️ Settings", "settings")]],
    )


def start_command() -> Command:
    return Command(
        handler=handle_start,
        name="start",
        description="Start the bot",
        pattern="{referral}",
        aliases=("🏠 Home", "menu"),
        callback_aliases=("start", "home"),
    )
