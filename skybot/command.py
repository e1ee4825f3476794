from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Callable, FrozenSet, Iterable, Optional, Tuple

from .events import CALLBACK_QUERY, MESSAGE, UPDATE_KINDS
from .patterns import BoundArguments, ParameterSpec, bind_arguments, compile_pattern, wildcard_match

if TYPE_CHECKING:
    from .context import Context

Handler = Callable[["Context"], None]

DEFAULT_TRIGGERS: FrozenSet[str] = frozenset({MESSAGE, CALLBACK_QUERY})


@lru_cache(maxsize=256)
def _slash_re(name: str) -> re.Pattern:
    # /name, /name@botname, then optional free text spanning lines
    return re.compile(r"/(" + re.escape(name) + r")(?:@\S+)?(?:\s+(.*))?", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class Match:
    """Result of a successful match, scoped to one dispatch."""
    arguments: BoundArguments = field(default_factory=list)
    callback_data: str = ""
    inline_query: str = ""


@dataclass(frozen=True)
class Command:
    """A routable command: a handler plus the rules that select it.

    Args:
        handler: Called with a ``Context`` when the command matches.
        name: Slash command name ('start' for /start). Empty for handlers
              that only react to aliases, callbacks or auxiliary updates.
        description: Shown by /help and registered with BotFather.
        pattern: Named argument pattern, e.g. '{username} {age: \\d+}'.
        aliases: Texts that trigger the command (case-insensitive, full text).
        callback_aliases: Callback data patterns; '*' acts as a wildcard.
        inline_aliases: Inline query patterns; '*' acts as a wildcard.
        triggers: Update kinds this command listens to.
    """

    handler: Handler
    name: str = ""
    description: str = ""
    pattern: str = ""
    aliases: Tuple[str, ...] = ()
    callback_aliases: Tuple[str, ...] = ()
    inline_aliases: Tuple[str, ...] = ()
    triggers: FrozenSet[str] = DEFAULT_TRIGGERS

    def __post_init__(self) -> None:
        # accept lists/sets from callers but store immutable values
        object.__setattr__(self, "aliases", tuple(self.aliases))
        object.__setattr__(self, "callback_aliases", tuple(self.callback_aliases))
        object.__setattr__(self, "inline_aliases", tuple(self.inline_aliases))
        object.__setattr__(self, "triggers", frozenset(self.triggers))
        unknown = sorted(self.triggers.difference(UPDATE_KINDS))
        if unknown:
            raise ValueError(f"unknown trigger(s) for command {self.label!r}: {', '.join(unknown)}")

    @property
    def label(self) -> str:
        return self.name or getattr(self.handler, "__name__", "<handler>")

    @property
    def params(self) -> Tuple[ParameterSpec, ...]:
        return compile_pattern(self.pattern)

    def listens_to(self, kind: str) -> bool:
        return kind in self.triggers

    # ---------- matching ----------

    def match_message(self, text: str) -> Optional[Match]:
        if self.name:
            m = _slash_re(self.name).fullmatch(text)
            if m:
                rest = m.group(2) or ""
                return Match(arguments=bind_arguments(self.params, rest.split()))

        folded = text.casefold()
        for alias in self.aliases:
            if folded == alias.casefold():
                return Match()
        return None

    def match_callback(self, data: str) -> Optional[Match]:
        if self.name and data == self.name:
            return Match(callback_data=data)
        for pattern in self.callback_aliases:
            if wildcard_match(pattern, data):
                return Match(callback_data=data)
        return None

    def match_inline(self, query: str) -> Optional[Match]:
        for pattern in self.inline_aliases:
            if wildcard_match(pattern, query):
                return Match(inline_query=query)
        return None


def command(
    name: str = "",
    description: str = "",
    *,
    pattern: str = "",
    aliases: Iterable[str] = (),
    callback_aliases: Iterable[str] = (),
    inline_aliases: Iterable[str] = (),
    triggers: Iterable[str] = DEFAULT_TRIGGERS,
) -> Callable[[Handler], Command]:
    """Decorator turning a handler function into a ``Command``."""
    def decorator(fn: Handler) -> Command:
        return Command(
            handler=fn,
            name=name,
            description=description or (fn.__doc__ or "").strip(),
            pattern=pattern,
            aliases=tuple(aliases),
            callback_aliases=tuple(callback_aliases),
            inline_aliases=tuple(inline_aliases),
            triggers=frozenset(triggers),
        )
    return decorator
