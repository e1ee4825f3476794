from __future__ import annotations

from conftest import callback_update, inline_update, message_update
from skybot.events import Update


def test_classifies_by_priority():
    data = message_update("hi")
    data["callback_query"] = callback_update("x")["callback_query"]
    upd = Update.model_validate(data)
    assert upd.kind == "message"
    assert upd.payload is upd.message


def test_classifies_each_kind():
    assert Update.model_validate(callback_update("x")).kind == "callback_query"
    assert Update.model_validate(inline_update("q")).kind == "inline_query"
    assert Update.model_validate(message_update("e", edited=True)).kind == "edited_message"
    assert Update.model_validate({"update_id": 5, "poll": {"id": "p"}}).kind == "poll"
    assert Update.model_validate({"update_id": 6}).kind is None


def test_sender_and_effective_message():
    upd = Update.model_validate(callback_update("x", chat_id=9, user_id=11))
    assert upd.sender.id == 11
    assert upd.effective_message.chat.id == 9

    upd = Update.model_validate({
        "update_id": 7,
        "chat_join_request": {"chat": {"id": -100}, "from": {"id": 12, "first_name": "Bo"}, "date": 1},
    })
    assert upd.sender.first_name == "Bo"

    upd = Update.model_validate({"update_id": 8, "channel_post": {"message_id": 1, "chat": {"id": -5}, "text": "x"}})
    assert upd.sender is None
    assert upd.effective_message.chat.id == -5


def test_missing_text_is_none_and_extra_fields_ignored():
    data = message_update("x")
    del data["message"]["text"]
    data["message"]["photo"] = [{"file_id": "abc"}]
    upd = Update.model_validate(data)
    assert upd.message.text is None
