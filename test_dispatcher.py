from __future__ import annotations

import logging

import pytest

from conftest import FakeBot, callback_update, inline_update, message_update
from skybot import (
    Command,
    CommandRegistry,
    Dispatcher,
    InMemoryUserRepo,
    RegistryFrozenError,
    TelegramError,
    UNKNOWN_ACTION_TEXT,
    UNKNOWN_COMMAND_TEXT,
)
from skybot.commands import default_commands


class Recorder:
    def __init__(self):
        self.seen = []

    def handler(self, tag):
        def _h(ctx):
            self.seen.append((tag, ctx))
        _h.__name__ = f"handle_{tag}"
        return _h


def _dispatcher(bot, *commands, users=None):
    return Dispatcher(bot, CommandRegistry(commands), users=users)


def test_scenario_a_binds_referral(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("start"), name="start", pattern="{referral}"))
    result = d.dispatch_raw(message_update("/start promo42"))
    assert result.status == "invoked"
    (tag, ctx), = rec.seen
    assert ctx.argument("referral") == "promo42"
    assert ctx.arguments == {"referral": "promo42"}


def test_scenario_b_failed_validation_is_absent(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("start"), name="start", pattern="{age: \\d+}"))
    d.dispatch_raw(message_update("/start abc"))
    ctx = rec.seen[0][1]
    assert ctx.arguments == {"age": None}
    assert ctx.argument("age", "18") == "18"


def test_scenario_c_callback_wildcard(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("pages"), callback_aliases=["page_*", "settings"]))
    result = d.dispatch_raw(callback_update("page_3"))
    assert result.handled
    ctx = rec.seen[0][1]
    assert ctx.callback_data == "page_3"
    assert ctx.is_callback_query
    assert bot.calls == []


def test_scenario_d_plain_text_is_silent(bot):
    d = _dispatcher(bot, Command(lambda ctx: None, name="start"))
    result = d.dispatch_raw(message_update("hello"))
    assert result.status == "ignored"
    assert bot.calls == []


def test_scenario_e_unknown_command_reply(bot):
    d = _dispatcher(bot, Command(lambda ctx: None, name="start"))
    result = d.dispatch_raw(message_update("/nope", chat_id=99))
    assert result.status == "unknown_command"
    assert bot.calls == [("sendMessage", {"chat_id": 99, "text": UNKNOWN_COMMAND_TEXT})]


def test_unknown_callback_is_answered_quietly(bot):
    d = _dispatcher(bot, Command(lambda ctx: None, name="start"))
    result = d.dispatch_raw(callback_update("nothing"))
    assert result.status == "unknown_action"
    method, payload = bot.calls[0]
    assert method == "answerCallbackQuery"
    assert payload["callback_query_id"] == "cb-1"
    assert payload["text"] == UNKNOWN_ACTION_TEXT
    assert payload["show_alert"] is False


def test_empty_callback_data_is_ignored(bot):
    d = _dispatcher(bot)
    assert d.dispatch_raw(callback_update("")).status == "ignored"
    assert bot.calls == []


def test_first_match_wins(bot):
    rec = Recorder()
    d = _dispatcher(
        bot,
        Command(rec.handler("first"), name="go"),
        Command(rec.handler("second"), name="go"),
    )
    result = d.dispatch_raw(message_update("/go"))
    assert [t for t, _ in rec.seen] == ["first"]
    assert result.command.name == "go"


def test_triggers_filter_commands(bot):
    rec = Recorder()
    d = _dispatcher(
        bot,
        Command(rec.handler("cb_only"), name="go", triggers={"callback_query"}),
        Command(rec.handler("msg"), name="go"),
    )
    d.dispatch_raw(message_update("/go"))
    assert [t for t, _ in rec.seen] == ["msg"]


def test_inline_query_dispatch_and_silence(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("inline"), inline_aliases=["find *"], triggers={"inline_query"}))
    assert d.dispatch_raw(inline_update("find cats")).handled
    assert rec.seen[0][1].inline_query == "find cats"
    assert d.dispatch_raw(inline_update("other")).status == "ignored"
    assert bot.calls == []


def test_edited_message_uses_text_matcher_without_fallback(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("edit"), name="fix", triggers={"edited_message"}))
    assert d.dispatch_raw(message_update("/fix a b", edited=True)).handled
    assert rec.seen[0][1].arguments == ["a", "b"]
    assert d.dispatch_raw(message_update("/unknown", edited=True)).status == "ignored"
    assert bot.calls == []


def test_auxiliary_kind_goes_to_first_listener(bot):
    rec = Recorder()
    d = _dispatcher(
        bot,
        Command(rec.handler("msg"), name="start"),
        Command(rec.handler("poll_a"), triggers={"poll"}),
        Command(rec.handler("poll_b"), triggers={"poll"}),
    )
    result = d.dispatch_raw({"update_id": 9, "poll": {"id": "p1", "question": "?"}})
    assert result.handled
    assert [t for t, _ in rec.seen] == ["poll_a"]
    assert d.dispatch_raw({"update_id": 10, "shipping_query": {"id": "s"}}).status == "ignored"


def test_sender_is_saved_before_matching(bot):
    users = InMemoryUserRepo()
    d = _dispatcher(bot, users=users)
    d.dispatch_raw(message_update("hello", user_id=321))
    assert users.find_by_telegram_id(321)["first_name"] == "Ada"


def test_user_store_failure_does_not_block_dispatch(bot, caplog):
    class BrokenRepo(InMemoryUserRepo):
        def upsert_from_telegram(self, user):
            raise RuntimeError("db is down")

    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("start"), name="start"), users=BrokenRepo())
    with caplog.at_level(logging.ERROR, logger="skybot"):
        assert d.dispatch_raw(message_update("/start")).handled
    assert "Failed to save user" in caplog.text
    assert len(rec.seen) == 1


def test_transport_failure_propagates_from_handler():
    bot = FakeBot(fail=True)
    d = _dispatcher(bot, Command(lambda ctx: ctx.reply("hi"), name="start"))
    with pytest.raises(TelegramError):
        d.dispatch_raw(message_update("/start"))


def test_contexts_are_fresh_per_dispatch(bot):
    rec = Recorder()
    d = _dispatcher(bot, Command(rec.handler("start"), name="start", pattern="{referral}",
                                 callback_aliases=["start"]))
    d.dispatch_raw(message_update("/start one"))
    d.dispatch_raw(callback_update("start"))
    first, second = rec.seen[0][1], rec.seen[1][1]
    assert first is not second
    assert first.argument("referral") == "one"
    assert second.argument("referral") is None
    assert first.callback_data == ""
    assert second.callback_data == "start"


def test_registry_is_frozen_by_dispatcher(bot):
    registry = CommandRegistry()
    Dispatcher(bot, registry)
    with pytest.raises(RegistryFrozenError):
        registry.register(Command(lambda ctx: None, name="late"))


def test_builtin_start_and_help(bot):
    d = _dispatcher(bot, *[f() for f in default_commands()])
    d.dispatch_raw(message_update("/start <friend>"))
    method, payload = bot.calls[-1]
    assert method == "sendMessage"
    assert "&lt;friend&gt;" in payload["text"]
    assert payload["parse_mode"] == "HTML"
    assert payload["reply_markup"]["inline_keyboard"][0][0] == {"text": "📖 Help", "callback_data": "help"}

    d.dispatch_raw(message_update("menu"))
    assert "Ada" in bot.calls[-1][1]["text"]

    d.dispatch_raw(callback_update("help"))
    assert bot.methods()[-2:] == ["answerCallbackQuery", "editMessageText"]
    text = bot.calls[-1][1]["text"]
    assert "/start — Start the bot" in text
    assert "/help — Show available commands" in text
