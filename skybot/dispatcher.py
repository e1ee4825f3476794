from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .client import Messenger
from .command import Command, Match
from .config import BotSettings
from .context import Context
from .events import AUXILIARY_KINDS, CALLBACK_QUERY, EDITED_MESSAGE, INLINE_QUERY, MESSAGE, Update
from .registry import CommandRegistry
from .repo import UserRepository

COMMAND_PREFIX = "/"
UNKNOWN_COMMAND_TEXT = "❌ Unknown command. Use /help to see available commands."
UNKNOWN_ACTION_TEXT = "❌ Unknown action."

INVOKED = "invoked"
UNKNOWN_COMMAND = "unknown_command"
UNKNOWN_ACTION = "unknown_action"
IGNORED = "ignored"


@dataclass(frozen=True)
class DispatchResult:
    kind: Optional[str]
    status: str
    command: Optional[Command] = None

    @property
    def handled(self) -> bool:
        return self.status == INVOKED


class Dispatcher:
    """Routes one update to the first matching command.

    Commands are tried in registry order and only those listening to the
    update's kind are considered. When nothing matches, slash commands get an
    "unknown command" reply, callbacks get an "unknown action" answer and
    every other update is dropped. Dispatches are serialized per instance,
    so concurrent callers see one update handled at a time end to end.

    Args:
        bot: Outbound Bot API capability.
        registry: Commands to route to; frozen here.
        users: Optional store updated with the sender of every update.
        settings: Bot settings passed on to handlers.
        logger: Logger used here and handed to handlers.
    """

    def __init__(
        self,
        bot: Messenger,
        registry: CommandRegistry,
        *,
        users: Optional[UserRepository] = None,
        settings: Optional[BotSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.bot = bot
        self.registry = registry.freeze()
        self.users = users
        self.settings = settings or BotSettings()
        self.logger = logger or logging.getLogger("skybot")
        self._lock = threading.Lock()

    def dispatch_raw(self, data: Dict[str, Any]) -> DispatchResult:
        return self.dispatch(Update.model_validate(data))

    def dispatch(self, update: Update) -> DispatchResult:
        with self._lock:
            return self._dispatch(update)

    # ---------- internal ----------

    def _dispatch(self, update: Update) -> DispatchResult:
        self._save_user(update)

        kind = update.kind
        if kind is None:
            self.logger.debug("update %s has no known payload", update.update_id)
            return DispatchResult(None, IGNORED)

        if kind == MESSAGE:
            return self._dispatch_message(update)
        if kind == CALLBACK_QUERY:
            return self._dispatch_callback(update)
        if kind == INLINE_QUERY:
            query = update.inline_query.query
            return self._first_match(update, kind, lambda c: c.match_inline(query)) or DispatchResult(kind, IGNORED)
        if kind == EDITED_MESSAGE:
            text = update.edited_message.text or ""
            if text:
                result = self._first_match(update, kind, lambda c: c.match_message(text))
                if result:
                    return result
            return DispatchResult(kind, IGNORED)
        if kind in AUXILIARY_KINDS:
            return self._first_match(update, kind, lambda c: Match()) or DispatchResult(kind, IGNORED)
        return DispatchResult(kind, IGNORED)

    def _dispatch_message(self, update: Update) -> DispatchResult:
        msg = update.message
        text = msg.text or ""
        if not text:
            return DispatchResult(MESSAGE, IGNORED)
        result = self._first_match(update, MESSAGE, lambda c: c.match_message(text))
        if result:
            return result
        if text.startswith(COMMAND_PREFIX):
            self.logger.info("unknown command %r in chat %s", text.split(maxsplit=1)[0], msg.chat.id)
            self.bot.send_message(msg.chat.id, UNKNOWN_COMMAND_TEXT)
            return DispatchResult(MESSAGE, UNKNOWN_COMMAND)
        return DispatchResult(MESSAGE, IGNORED)

    def _dispatch_callback(self, update: Update) -> DispatchResult:
        cq = update.callback_query
        data = cq.data or ""
        if not data:
            return DispatchResult(CALLBACK_QUERY, IGNORED)
        result = self._first_match(update, CALLBACK_QUERY, lambda c: c.match_callback(data))
        if result:
            return result
        self.logger.info("unknown callback data %r", data)
        self.bot.answer_callback_query(cq.id, UNKNOWN_ACTION_TEXT, show_alert=False)
        return DispatchResult(CALLBACK_QUERY, UNKNOWN_ACTION)

    def _first_match(
        self,
        update: Update,
        kind: str,
        matcher: Callable[[Command], Optional[Match]],
    ) -> Optional[DispatchResult]:
        for cmd in self.registry.listening_to(kind):
            match = matcher(cmd)
            if match is None:
                continue
            self.logger.debug("update %s (%s) -> %s", update.update_id, kind, cmd.label)
            ctx = Context(self.bot, update, kind, cmd, match, self.registry, self.settings, self.logger)
            cmd.handler(ctx)
            return DispatchResult(kind, INVOKED, cmd)
        return None

    def _save_user(self, update: Update) -> None:
        if self.users is None:
            return
        sender = update.sender
        if sender is None or not sender.id:
            return
        try:
            self.users.upsert_from_telegram(sender)
        except Exception as e:
            self.logger.exception("Failed to save user %s: %s", sender.id, e)
