from __future__ import annotations

import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .config import BotSettings
from .dispatcher import Dispatcher

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def create_webhook_router(
    dispatcher: Dispatcher,
    settings: BotSettings,
    *,
    logger: Optional[logging.Logger] = None,
) -> APIRouter:
    r = APIRouter(tags=["webhook"])
    log = logger or dispatcher.logger

    @r.post("/webhook/{token}")
    async def webhook(
        token: str,
        request: Request,
        secret: Optional[str] = Header(default=None, alias=SECRET_HEADER),
    ):
        if not settings.token or not hmac.compare_digest(token.encode(), settings.token.encode()):
            return JSONResponse({"error": "Invalid token"}, status_code=401)
        if settings.webhook_secret and not hmac.compare_digest((secret or "").encode(), settings.webhook_secret.encode()):
            return JSONResponse({"error": "Unauthorized"}, status_code=403)

        body = await request.body()
        if not body.strip():
            return {"ok": True}

        # every delivered update is acknowledged with 200
        try:
            data = json.loads(body)
            await run_in_threadpool(dispatcher.dispatch_raw, data)
        except Exception as e:
            log.exception("Failed to process update: %s", e)
        return {"ok": True}

    @r.get("/")
    def health():
        return {
            "status": "ok",
            "name": settings.bot_name,
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }

    return r
