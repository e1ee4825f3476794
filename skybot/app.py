from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Iterable, Optional, Union

from fastapi import FastAPI

from .client import BotApi, Messenger
from .command import Command
from .commands import default_commands
from .config import BotSettings
from .dispatcher import Dispatcher
from .log import configure_logging, shutdown_logging
from .registry import CommandFactory, CommandRegistry
from .repo import UserRepository, create_sqlite_repo
from .webhook import create_webhook_router


def create_bot(settings: BotSettings) -> BotApi:
    return BotApi(
        settings.token,
        api_url=settings.api_url,
        http_timeout=settings.http_timeout,
        connect_timeout=settings.connect_timeout,
        proxy=settings.proxy,
    )


def create_dispatcher(
    settings: BotSettings,
    commands: Optional[Iterable[Union[Command, CommandFactory]]] = None,
    *,
    bot: Optional[Messenger] = None,
    users: Optional[UserRepository] = None,
) -> Dispatcher:
    """Wire registry, client, user store and logger into a dispatcher."""
    logger = configure_logging(settings)
    registry = CommandRegistry(default_commands() if commands is None else commands)
    return Dispatcher(
        bot or create_bot(settings),
        registry,
        users=users if users is not None else create_sqlite_repo(settings.database_url),
        settings=settings,
        logger=logger,
    )


def create_app(
    settings: Optional[BotSettings] = None,
    commands: Optional[Iterable[Union[Command, CommandFactory]]] = None,
    *,
    bot: Optional[Messenger] = None,
    users: Optional[UserRepository] = None,
) -> FastAPI:
    settings = settings or BotSettings.from_env()
    dispatcher = create_dispatcher(settings, commands, bot=bot, users=users)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        dispatcher.logger.info("%s ready with %d commands", settings.bot_name, len(dispatcher.registry))
        yield
        shutdown_logging()

    app = FastAPI(title=settings.bot_name, lifespan=lifespan)
    app.state.dispatcher = dispatcher
    app.include_router(create_webhook_router(dispatcher, settings))
    return app
