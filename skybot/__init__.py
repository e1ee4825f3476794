from .patterns import ParameterSpec, BoundArguments, compile_pattern, bind_arguments, wildcard_match
from .events import Update, Message, CallbackQuery, InlineQuery, User, Chat, UPDATE_KINDS
from .command import Command, Match, command
from .context import Context
from .registry import CommandRegistry, RegistryFrozenError
from .dispatcher import Dispatcher, DispatchResult, UNKNOWN_COMMAND_TEXT, UNKNOWN_ACTION_TEXT
from .client import BotApi, Messenger, TelegramError, inline_keyboard
from .config import BotSettings
from .log import configure_logging, shutdown_logging
from .repo import UserRepository, InMemoryUserRepo, SQLiteUserRepository, create_sqlite_repo
from .app import create_app, create_dispatcher

__all__ = [
    "ParameterSpec", "BoundArguments", "compile_pattern", "bind_arguments", "wildcard_match",
    "Update", "Message", "CallbackQuery", "InlineQuery", "User", "Chat", "UPDATE_KINDS",
    "Command", "Match", "command", "Context",
    "CommandRegistry", "RegistryFrozenError",
    "Dispatcher", "DispatchResult", "UNKNOWN_COMMAND_TEXT", "UNKNOWN_ACTION_TEXT",
    "BotApi", "Messenger", "TelegramError", "inline_keyboard",
    "BotSettings", "configure_logging", "shutdown_logging",
    "UserRepository", "InMemoryUserRepo", "SQLiteUserRepository", "create_sqlite_repo",
    "create_app", "create_dispatcher",
]
