from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

from .config import BotSettings

LOGGER_NAME = "skybot"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"

# PSR-style level names found in older .env files
_LEVEL_ALIASES = {"notice": "INFO", "alert": "CRITICAL", "emergency": "CRITICAL"}


def _level(name: str) -> int:
    name = _LEVEL_ALIASES.get(name.lower(), name.upper())
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def _log_dir(settings: BotSettings) -> str:
    path = settings.log_path
    if not os.path.isabs(path):
        path = os.path.abspath(path)
    os.makedirs(path, exist_ok=True)
    return path


def _handler(settings: BotSettings) -> logging.Handler:
    channel = settings.log_channel
    if channel == "stderr":
        return logging.StreamHandler(sys.stderr)
    if channel == "stdout":
        return logging.StreamHandler(sys.stdout)
    if channel == "null":
        return logging.NullHandler()
    filename = os.path.join(_log_dir(settings), settings.log_file)
    if channel == "daily":
        return TimedRotatingFileHandler(
            filename, when="midnight", backupCount=settings.log_max_files, encoding="utf-8"
        )
    return logging.FileHandler(filename, encoding="utf-8")


def configure_logging(settings: BotSettings) -> logging.Logger:
    """Attach the configured handler to the ``skybot`` logger and return it.

    Calling it again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        if getattr(h, "_skybot", False):
            logger.removeHandler(h)
            h.close()
    handler = _handler(settings)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=settings.log_date_format))
    handler._skybot = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(_level(settings.log_level))
    return logger


def shutdown_logging() -> None:
    """Flush and close the handlers installed by ``configure_logging``."""
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        if getattr(h, "_skybot", False):
            h.flush()
            logger.removeHandler(h)
            h.close()
