from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


def _bool(val: Optional[str], default: bool = False) -> bool:
    if val is None or val == "":
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class BotSettings:
    token: str = ""
    domain: str = ""
    webhook_secret: str = ""
    admin_id: str = ""
    log_chat_id: str = ""
    api_url: str = "https://api.telegram.org"
    http_timeout: float = 30
    connect_timeout: float = 10
    proxy: str = ""
    parse_mode: str = "HTML"
    disable_web_preview: bool = False
    disable_notification: bool = False
    bot_name: str = "Sky Telegram Bot"
    database_url: str = "sqlite:///skybot.db"
    # Logging
    log_channel: str = "file"  # file|daily|stderr|stdout|null
    log_level: str = "debug"
    log_path: str = "storage/logs"
    log_file: str = "app.log"
    log_max_files: int = 7
    log_date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def webhook_url(self) -> str:
        if not self.domain:
            return ""
        return f"{self.domain.rstrip('/')}/webhook/{self.token}"

    def message_defaults(self) -> dict:
        """Default sendMessage fields applied by reply shortcuts."""
        out: dict = {}
        if self.parse_mode:
            out["parse_mode"] = self.parse_mode
        if self.disable_web_preview:
            out["disable_web_page_preview"] = True
        if self.disable_notification:
            out["disable_notification"] = True
        return out

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> "BotSettings":
        """Build settings from the environment (``.env`` is loaded first unless *env* is given)."""
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ
        d = cls()
        return cls(
            token=env.get("TELEGRAM_BOT_TOKEN", d.token),
            domain=env.get("TELEGRAM_DOMAIN", d.domain),
            webhook_secret=env.get("TELEGRAM_WEBHOOK_SECRET", d.webhook_secret),
            admin_id=env.get("TELEGRAM_ADMIN_ID", d.admin_id),
            log_chat_id=env.get("TELEGRAM_LOG_CHANNEL", d.log_chat_id),
            api_url=env.get("TELEGRAM_API_URL") or d.api_url,
            http_timeout=float(env.get("TELEGRAM_HTTP_TIMEOUT") or d.http_timeout),
            connect_timeout=float(env.get("TELEGRAM_CONNECT_TIMEOUT") or d.connect_timeout),
            proxy=env.get("TELEGRAM_PROXY", d.proxy),
            parse_mode=env.get("TELEGRAM_PARSE_MODE", d.parse_mode),
            disable_web_preview=_bool(env.get("TELEGRAM_DISABLE_WEB_PREVIEW")),
            disable_notification=_bool(env.get("TELEGRAM_DISABLE_NOTIFICATION")),
            bot_name=env.get("BOT_NAME") or d.bot_name,
            database_url=env.get("DATABASE_URL") or d.database_url,
            log_channel=(env.get("LOG_CHANNEL") or d.log_channel).lower(),
            log_level=(env.get("LOG_LEVEL") or d.log_level).lower(),
            log_path=env.get("LOG_PATH") or d.log_path,
            log_file=env.get("LOG_FILE") or d.log_file,
            log_max_files=int(env.get("LOG_MAX_FILES") or d.log_max_files),
            log_date_format=env.get("LOG_DATE_FORMAT") or d.log_date_format,
        )
