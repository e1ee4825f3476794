from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

import requests

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("photo", "document", "video", "voice", "audio", "animation", "sticker")


class TelegramError(RuntimeError):
    """A Bot API call failed (transport error or ``ok: false`` reply)."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"{method}: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class Messenger(Protocol):
    """Outbound operations used by the dispatcher and command handlers."""

    def call(self, method: str, **payload: Any) -> Any: ...

    def send_message(self, chat_id: int, text: str, **kw: Any) -> Any: ...

    def edit_message_text(self, chat_id: int, message_id: int, text: str, **kw: Any) -> Any: ...

    def edit_message_reply_markup(self, chat_id: int, message_id: int, reply_markup: dict, **kw: Any) -> Any: ...

    def delete_message(self, chat_id: int, message_id: int) -> Any: ...

    def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None,
                              show_alert: bool = False, **kw: Any) -> Any: ...

    def answer_inline_query(self, inline_query_id: str, results: List[dict], **kw: Any) -> Any: ...

    def forward_message(self, chat_id: int, from_chat_id: int, message_id: int, **kw: Any) -> Any: ...

    def send_media(self, kind: str, chat_id: int, media: str, **kw: Any) -> Any: ...

    def send_chat_action(self, chat_id: int, action: str = "typing") -> Any: ...


def inline_keyboard(buttons: List[List[Tuple[str, str]]]) -> dict:
    """Rows of (text, callback_data) pairs as ``reply_markup``."""
    return {
        "inline_keyboard": [
            [{"text": text, "callback_data": data} for text, data in row]
            for row in buttons
        ]
    }


class BotApi:
    """Bot API client posting JSON over a ``requests`` session.

    Args:
        token: The Telegram bot token.
        api_url: Base API URL (a local Bot API server can be used instead).
        http_timeout: Read timeout in seconds.
        connect_timeout: Connect timeout in seconds.
        proxy: Optional http(s) proxy URL for outgoing requests.
        max_retries: Attempts per call on network errors.
        session: Optional pre-built session.
    """

    def __init__(self, token: str, *, api_url: str = "https://api.telegram.org",
                 http_timeout: float = 30, connect_timeout: float = 10,
                 proxy: str = "", max_retries: int = 3,
                 session: Optional[requests.Session] = None):
        if not token:
            raise ValueError("bot token is required")
        self.token = token
        self.url = f"{api_url.rstrip('/')}/bot{token}/"
        self.timeout = (connect_timeout, http_timeout)
        self.max_retries = max(1, max_retries)
        self._sess = session or requests.Session()
        if proxy:
            self._sess.proxies.update({"http": proxy, "https": proxy})

    # ---------- messages ----------

    def send_message(self, chat_id: int, text: str, **kw: Any) -> dict:
        return self.call("sendMessage", chat_id=chat_id, text=text, **kw)

    def edit_message_text(self, chat_id: int, message_id: int, text: str, **kw: Any) -> dict:
        return self.call("editMessageText", chat_id=chat_id, message_id=message_id, text=text, **kw)

    def edit_message_reply_markup(self, chat_id: int, message_id: int, reply_markup: dict, **kw: Any) -> dict:
        return self.call("editMessageReplyMarkup", chat_id=chat_id, message_id=message_id,
                         reply_markup=reply_markup, **kw)

    def delete_message(self, chat_id: int, message_id: int) -> bool:
        return bool(self.call("deleteMessage", chat_id=chat_id, message_id=message_id))

    def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None,
                              show_alert: bool = False, **kw: Any) -> bool:
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id, **kw}
        if text:
            payload["text"] = text
        if show_alert:
            payload["show_alert"] = True
        return bool(self.call("answerCallbackQuery", **payload))

    def answer_inline_query(self, inline_query_id: str, results: List[dict], **kw: Any) -> bool:
        return bool(self.call("answerInlineQuery", inline_query_id=inline_query_id, results=results, **kw))

    def forward_message(self, chat_id: int, from_chat_id: int, message_id: int, **kw: Any) -> dict:
        return self.call("forwardMessage", chat_id=chat_id, from_chat_id=from_chat_id,
                         message_id=message_id, **kw)

    def send_media(self, kind: str, chat_id: int, media: str, **kw: Any) -> dict:
        """Send a photo/document/video/... by file_id or URL (``send_media('photo', chat, url)``)."""
        if kind not in MEDIA_KINDS:
            raise ValueError(f"unsupported media kind: {kind}")
        return self.call("send" + kind.capitalize(), chat_id=chat_id, **{kind: media}, **kw)

    def send_chat_action(self, chat_id: int, action: str = "typing") -> bool:
        return bool(self.call("sendChatAction", chat_id=chat_id, action=action))

    # ---------- bot setup ----------

    def set_webhook(self, url: str, secret_token: str = "", **kw: Any) -> bool:
        payload: Dict[str, Any] = {"url": url, **kw}
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(self.call("setWebhook", **payload))

    def delete_webhook(self, drop_pending_updates: bool = False) -> bool:
        return bool(self.call("deleteWebhook", drop_pending_updates=drop_pending_updates))

    def get_webhook_info(self) -> dict:
        return self.call("getWebhookInfo")

    def set_my_commands(self, commands: Iterable[Tuple[str, str]]) -> bool:
        table = [{"command": name, "description": desc} for name, desc in commands]
        logger.info("registering commands: %s", [c["command"] for c in table])
        return bool(self.call("setMyCommands", commands=table))

    # ---------- internal ----------

    def call(self, method: str, **payload: Any) -> Any:
        """POST a Bot API method and return its ``result``.

        Network errors are retried with exponential backoff; an ``ok: false``
        reply is raised immediately as ``TelegramError``.
        """
        last_error = ""
        for attempt in range(self.max_retries):
            try:
                rsp = self._sess.post(self.url + method, json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_error = str(e)
                logger.warning("tg http %s: %s", method, e)
                if attempt + 1 < self.max_retries:
                    time.sleep(2 ** attempt)
                continue
            try:
                body = rsp.json()
            except ValueError:
                body = {}
            if rsp.ok and body.get("ok", False):
                return body.get("result")
            description = body.get("description") or f"HTTP {rsp.status_code}"
            raise TelegramError(method, description, body.get("error_code", rsp.status_code))
        raise TelegramError(method, last_error or "request failed")
