from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Priority order used to classify an update; exactly one kind is selected.
MESSAGE = "message"
CALLBACK_QUERY = "callback_query"
INLINE_QUERY = "inline_query"
EDITED_MESSAGE = "edited_message"

AUXILIARY_KINDS = (
    "channel_post",
    "edited_channel_post",
    "chat_member",
    "my_chat_member",
    "chat_join_request",
    "pre_checkout_query",
    "shipping_query",
    "poll",
    "poll_answer",
)

UPDATE_KINDS = (MESSAGE, CALLBACK_QUERY, INLINE_QUERY, EDITED_MESSAGE) + AUXILIARY_KINDS


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(_Model):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None


class Chat(_Model):
    id: int
    type: Optional[str] = None
    title: Optional[str] = None
    username: Optional[str] = None


class Message(_Model):
    message_id: int
    chat: Chat
    from_user: Optional[User] = Field(default=None, alias="from")
    date: Optional[int] = None
    text: Optional[str] = None
    caption: Optional[str] = None


class CallbackQuery(_Model):
    id: str
    from_user: User = Field(alias="from")
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None


class InlineQuery(_Model):
    id: str
    from_user: User = Field(alias="from")
    query: str = ""
    offset: str = ""


Payload = Union[Message, CallbackQuery, InlineQuery, Dict[str, Any]]


class Update(_Model):
    """One inbound Bot API update.

    Typed fields cover what the matchers read; the auxiliary kinds are kept
    as the raw dicts Telegram sent.
    """

    update_id: int = 0
    message: Optional[Message] = None
    callback_query: Optional[CallbackQuery] = None
    inline_query: Optional[InlineQuery] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None
    chat_member: Optional[Dict[str, Any]] = None
    my_chat_member: Optional[Dict[str, Any]] = None
    chat_join_request: Optional[Dict[str, Any]] = None
    pre_checkout_query: Optional[Dict[str, Any]] = None
    shipping_query: Optional[Dict[str, Any]] = None
    poll: Optional[Dict[str, Any]] = None
    poll_answer: Optional[Dict[str, Any]] = None

    @property
    def kind(self) -> Optional[str]:
        for name in UPDATE_KINDS:
            if getattr(self, name) is not None:
                return name
        return None

    @property
    def payload(self) -> Optional[Payload]:
        kind = self.kind
        return getattr(self, kind) if kind else None

    @property
    def effective_message(self) -> Optional[Message]:
        """The message this update refers to, if any."""
        if self.message is not None:
            return self.message
        if self.callback_query is not None:
            return self.callback_query.message
        for msg in (self.edited_message, self.channel_post, self.edited_channel_post):
            if msg is not None:
                return msg
        return None

    @property
    def sender(self) -> Optional[User]:
        """The user who caused the update (the Bot API ``from`` field)."""
        for typed in (self.message, self.callback_query, self.inline_query, self.edited_message):
            if typed is not None and typed.from_user is not None:
                return typed.from_user
        for name in ("chat_member", "my_chat_member", "chat_join_request",
                     "pre_checkout_query", "shipping_query"):
            raw = getattr(self, name)
            if raw and isinstance(raw.get("from"), dict) and "id" in raw["from"]:
                return User.model_validate(raw["from"])
        return None
