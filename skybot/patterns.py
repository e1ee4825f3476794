from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*(?::\s*(.+?))?\s*\}")
WILDCARD = "*"

BoundArguments = Union[Dict[str, Optional[str]], List[str]]


class ParameterSpec(NamedTuple):
    name: str
    validator: Optional[str] = None


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Tuple[ParameterSpec, ...]:
    """Extract the named parameters of an argument pattern.

    ``'{username} {age: \\d+}'`` gives ``(ParameterSpec('username', None),
    ParameterSpec('age', '\\d+'))``. Text outside placeholders and malformed
    placeholders are ignored; a repeated name keeps its first position.
    """
    if not pattern:
        return ()
    specs: List[ParameterSpec] = []
    seen = set()
    for m in PLACEHOLDER_RE.finditer(pattern):
        name = m.group(1)
        if name in seen:
            continue
        seen.add(name)
        validator = m.group(2).strip() if m.group(2) is not None else None
        specs.append(ParameterSpec(name, validator))
    return tuple(specs)


@lru_cache(maxsize=256)
def _validator_re(validator: str) -> Optional[re.Pattern]:
    try:
        return re.compile(f"(?:{validator})")
    except re.error as e:
        logger.warning("invalid argument validator %r: %s", validator, e)
        return None


def _is_valid(validator: str, value: str) -> bool:
    rx = _validator_re(validator)
    return rx is not None and rx.fullmatch(value) is not None


def bind_arguments(specs: Sequence[ParameterSpec], tokens: Sequence[str]) -> BoundArguments:
    """Bind whitespace-split tokens to parameter specs by position.

    Without specs the tokens come back as a positional list. Otherwise every
    spec name is present in the result; missing tokens and tokens failing
    their validator are ``None``. Surplus tokens are dropped.
    """
    if not specs:
        return list(tokens)
    out: Dict[str, Optional[str]] = {}
    for i, spec in enumerate(specs):
        value = tokens[i] if i < len(tokens) else None
        if value is not None and spec.validator is not None and not _is_valid(spec.validator, value):
            value = None
        out[spec.name] = value
    return out


@lru_cache(maxsize=512)
def _wildcard_re(pattern: str) -> re.Pattern:
    body = ".*".join(re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(body, re.IGNORECASE)


def wildcard_match(pattern: str, value: str) -> bool:
    """Exact match, or case-insensitive ``*`` wildcard match ('page_*' ~ 'page_1')."""
    if pattern == value:
        return True
    if WILDCARD in pattern:
        return _wildcard_re(pattern).fullmatch(value) is not None
    return False
