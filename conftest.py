from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pytest


class FakeBot:
    """Records outbound Bot API calls instead of sending them."""

    def __init__(self, fail: bool = False):
        self.calls: List[Tuple[str, dict]] = []
        self.fail = fail

    def call(self, method: str, **payload: Any) -> Any:
        self.calls.append((method, payload))
        if self.fail:
            from skybot import TelegramError
            raise TelegramError(method, "Bad Request: chat not found", 400)
        return {"message_id": len(self.calls)}

    def send_message(self, chat_id, text, **kw):
        return self.call("sendMessage", chat_id=chat_id, text=text, **kw)

    def edit_message_text(self, chat_id, message_id, text, **kw):
        return self.call("editMessageText", chat_id=chat_id, message_id=message_id, text=text, **kw)

    def edit_message_reply_markup(self, chat_id, message_id, reply_markup, **kw):
        return self.call("editMessageReplyMarkup", chat_id=chat_id, message_id=message_id,
                         reply_markup=reply_markup, **kw)

    def delete_message(self, chat_id, message_id):
        return self.call("deleteMessage", chat_id=chat_id, message_id=message_id)

    def answer_callback_query(self, callback_query_id, text: Optional[str] = None, show_alert=False, **kw):
        return self.call("answerCallbackQuery", callback_query_id=callback_query_id, text=text,
                         show_alert=show_alert, **kw)

    def answer_inline_query(self, inline_query_id, results, **kw):
        return self.call("answerInlineQuery", inline_query_id=inline_query_id, results=results, **kw)

    def forward_message(self, chat_id, from_chat_id, message_id, **kw):
        return self.call("forwardMessage", chat_id=chat_id, from_chat_id=from_chat_id,
                         message_id=message_id, **kw)

    def send_media(self, kind, chat_id, media, **kw):
        return self.call("send" + kind.capitalize(), chat_id=chat_id, **{kind: media}, **kw)

    def send_chat_action(self, chat_id, action="typing"):
        return self.call("sendChatAction", chat_id=chat_id, action=action)

    def methods(self) -> List[str]:
        return [m for m, _ in self.calls]


def message_update(text: str, *, chat_id: int = 42, user_id: int = 7, update_id: int = 1,
                   edited: bool = False) -> dict:
    msg = {
        "message_id": 100,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": user_id, "is_bot": False, "first_name": "Ada", "username": "ada"},
        "text": text,
    }
    return {"update_id": update_id, ("edited_message" if edited else "message"): msg}


def callback_update(data: str, *, chat_id: int = 42, user_id: int = 7) -> dict:
    return {
        "update_id": 2,
        "callback_query": {
            "id": "cb-1",
            "from": {"id": user_id, "first_name": "Ada"},
            "message": {"message_id": 55, "chat": {"id": chat_id}, "text": "menu"},
            "data": data,
        },
    }


def inline_update(query: str, *, user_id: int = 7) -> dict:
    return {
        "update_id": 3,
        "inline_query": {"id": "iq-1", "from": {"id": user_id, "first_name": "Ada"}, "query": query, "offset": ""},
    }


@pytest.fixture
def bot() -> FakeBot:
    return FakeBot()
