"""Built-in commands.

``default_commands()`` is the registration table used by ``create_app``;
its order is the order commands are tried in.
"""
from __future__ import annotations

from typing import List

from ..registry import CommandFactory
from .help import help_command
from .start import start_command


def default_commands() -> List[CommandFactory]:
    return [start_command, help_command]


__all__ = ["default_commands", "help_command", "start_command"]
