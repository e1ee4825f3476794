from __future__ import annotations

from ..command import Command
from ..context import Context


def help_text(ctx: Context) -> str:
    lines = ["📖 <b>Available Commands</b>\n"]
    for name, desc in ctx.registry.bot_commands():
        lines.append(f"/{name} — {desc}")
    return "\n".join(lines)


def handle_help(ctx: Context) -> None:
    text = help_text(ctx)
    if ctx.is_callback_query:
        ctx.answer_callback()
        ctx.edit_message(text, reply_markup={"inline_keyboard": [[{"text": "🔙 Back", "callback_data": "start"}]]})
    else:
        ctx.reply(text)


def help_command() -> Command:
    return Command(
        handler=handle_help,
        name="help",
        description="Show available commands",
        callback_aliases=("help",),
    )
