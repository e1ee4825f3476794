from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Union

from .client import Messenger, inline_keyboard
from .command import Command, Match
from .config import BotSettings
from .events import Message, Update, User

if TYPE_CHECKING:
    from .registry import CommandRegistry


class Context:
    """Everything a handler sees for one dispatched update.

    A new context is built for every match, so arguments and matched payloads
    never leak between updates even when commands are shared.
    """

    def __init__(
        self,
        bot: Messenger,
        update: Update,
        kind: str,
        command: Command,
        match: Match,
        registry: "CommandRegistry",
        settings: Optional[BotSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.bot = bot
        self.update = update
        self.kind = kind
        self.command = command
        self.registry = registry
        self.settings = settings or BotSettings()
        self.logger = logger or logging.getLogger("skybot")
        self.arguments = match.arguments
        self.callback_data = match.callback_data
        self.inline_query = match.inline_query

    # ---------- arguments ----------

    def argument(self, key: Union[str, int, None] = None, default: Any = None) -> Any:
        """
        Named argument by key, positional argument by index, or all arguments.

        Usage:
            ctx.argument('username')           # named arg
            ctx.argument('username', 'guest')  # named arg with default
            ctx.argument(0)                    # positional (0-based)
            ctx.argument()                     # all arguments
        """
        if key is None:
            return self.arguments
        if isinstance(key, str):
            if isinstance(self.arguments, dict):
                value = self.arguments.get(key)
                return default if value is None else value
            return default
        values = list(self.arguments.values()) if isinstance(self.arguments, dict) else self.arguments
        if -len(values) <= key < len(values) and values[key] is not None:
            return values[key]
        return default

    def argument_string(self) -> str:
        values = self.arguments.values() if isinstance(self.arguments, dict) else self.arguments
        return " ".join(v for v in values if v is not None)

    def has_arguments(self) -> bool:
        return bool(self.arguments)

    # ---------- update accessors ----------

    @property
    def is_callback_query(self) -> bool:
        return self.update.callback_query is not None

    @property
    def is_inline_query(self) -> bool:
        return self.update.inline_query is not None

    @property
    def message(self) -> Optional[Message]:
        return self.update.effective_message

    @property
    def chat_id(self) -> Optional[int]:
        msg = self.message
        return msg.chat.id if msg else None

    @property
    def message_id(self) -> Optional[int]:
        msg = self.message
        return msg.message_id if msg else None

    @property
    def message_text(self) -> str:
        msg = self.message
        return (msg.text or "") if msg else ""

    @property
    def sender(self) -> Optional[User]:
        return self.update.sender

    @property
    def user_id(self) -> Optional[int]:
        user = self.sender
        return user.id if user else None

    # ---------- responses ----------

    def reply(self, text: str, **extra: Any) -> Any:
        """Send text to the current chat with the configured parse mode."""
        params = {**self.settings.message_defaults(), **extra}
        return self.bot.send_message(self.chat_id, text, **params)

    def reply_with_keyboard(self, text: str, keyboard: list, **extra: Any) -> Any:
        return self.reply(text, reply_markup=_markup(keyboard), **extra)

    def edit_message(self, text: str, **extra: Any) -> Any:
        params = {**self.settings.message_defaults(), **extra}
        params.pop("disable_notification", None)
        return self.bot.edit_message_text(self.chat_id, self.message_id, text, **params)

    def edit_keyboard(self, keyboard: list, **extra: Any) -> Any:
        return self.bot.edit_message_reply_markup(self.chat_id, self.message_id, _markup(keyboard), **extra)

    def answer_callback(self, text: str = "", alert: bool = False, **extra: Any) -> bool:
        if self.update.callback_query is None:
            return False
        return bool(self.bot.answer_callback_query(self.update.callback_query.id, text or None, alert, **extra))

    def answer_inline(self, results: List[dict], **extra: Any) -> bool:
        if self.update.inline_query is None:
            return False
        return bool(self.bot.answer_inline_query(self.update.inline_query.id, results, **extra))

    def delete_message(self) -> Any:
        return self.bot.delete_message(self.chat_id, self.message_id)

    def forward_to(self, chat_id: int) -> Any:
        return self.bot.forward_message(chat_id, self.chat_id, self.message_id)

    def send_action(self, action: str = "typing") -> Any:
        return self.bot.send_chat_action(self.chat_id, action)

    def reply_with_media(self, kind: str, media: str, caption: str = "", **extra: Any) -> Any:
        params: dict = {}
        if kind != "sticker":
            if caption:
                params["caption"] = caption
            if self.settings.parse_mode:
                params["parse_mode"] = self.settings.parse_mode
        params.update(extra)
        return self.bot.send_media(kind, self.chat_id, media, **params)

    def reply_with_location(self, latitude: float, longitude: float, **extra: Any) -> Any:
        return self.bot.call("sendLocation", chat_id=self.chat_id, latitude=latitude, longitude=longitude, **extra)

    def reply_with_contact(self, phone_number: str, first_name: str, **extra: Any) -> Any:
        return self.bot.call("sendContact", chat_id=self.chat_id, phone_number=phone_number,
                             first_name=first_name, **extra)


def _markup(keyboard: list) -> dict:
    # rows of (text, callback_data) tuples or ready Bot API button dicts
    if keyboard and keyboard[0] and isinstance(keyboard[0][0], tuple):
        return inline_keyboard(keyboard)
    return {"inline_keyboard": keyboard}
