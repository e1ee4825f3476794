from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from .command import DEFAULT_TRIGGERS, Command, Handler, command

logger = logging.getLogger(__name__)

CommandFactory = Callable[[], Command]


class RegistryFrozenError(RuntimeError):
    pass


class CommandRegistry:
    """Ordered list of commands; registration order is the dispatch tie-break.

    The registry is filled at startup and frozen before the first dispatch.
    """

    def __init__(self, commands: Iterable[Union[Command, CommandFactory]] = ()):
        self._commands: List[Command] = []
        self._frozen = False
        for entry in commands:
            self.register(entry)

    def register(self, entry: Union[Command, CommandFactory]) -> Command:
        """Append a command, or a zero-argument factory returning one."""
        if self._frozen:
            raise RegistryFrozenError("command registry is frozen")
        cmd = entry if isinstance(entry, Command) else entry()
        if not isinstance(cmd, Command):
            raise TypeError(f"expected Command, got {type(cmd).__name__}")
        if cmd.name and self.get(cmd.name) is not None:
            logger.warning("command %r registered twice; the first one wins", cmd.name)
        self._commands.append(cmd)
        return cmd

    def command(
        self,
        name: str = "",
        description: str = "",
        *,
        pattern: str = "",
        aliases: Iterable[str] = (),
        callback_aliases: Iterable[str] = (),
        inline_aliases: Iterable[str] = (),
        triggers: Iterable[str] = DEFAULT_TRIGGERS,
    ) -> Callable[[Handler], Handler]:
        """Decorator registering a handler function; the function is returned unchanged."""
        def decorator(fn: Handler) -> Handler:
            self.register(command(
                name, description, pattern=pattern, aliases=aliases,
                callback_aliases=callback_aliases, inline_aliases=inline_aliases,
                triggers=triggers,
            )(fn))
            return fn
        return decorator

    def freeze(self) -> "CommandRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def commands(self) -> Tuple[Command, ...]:
        return tuple(self._commands)

    def get(self, name: str) -> Optional[Command]:
        for cmd in self._commands:
            if cmd.name == name:
                return cmd
        return None

    def listening_to(self, kind: str) -> Iterator[Command]:
        """Commands that react to *kind*, in registration order."""
        return (c for c in self._commands if c.listens_to(kind))

    def bot_commands(self) -> List[Tuple[str, str]]:
        """(name, description) pairs for setMyCommands and /help."""
        return [(c.name, c.description) for c in self._commands if c.name and c.description]

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
