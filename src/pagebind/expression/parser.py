"""Field expression parsing and the per-engine descriptor cache."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
import threading

from pagebind.expression.tokenizer import tokenize

logger = logging.getLogger(__name__)

# name or name(args); args may not contain a closing parenthesis
_FUNCTION_RE = re.compile(r"^\s*([a-zA-Z]+)\s*(\(([^)]*)\))?\s*$")


@dataclass(frozen=True, slots=True)
class ExpressionDescriptor:
    """Structured form of one raw field expression."""

    selector: str = ""
    function_name: str = ""
    arguments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_function(self) -> bool:
        return bool(self.function_name)


def parse_expression(raw: str, function_separator: str = "->") -> ExpressionDescriptor:
    """Parse `selector->name(args)` into a descriptor.

    A function part that does not match the call grammar leaves the
    descriptor selector-only instead of failing.
    """

    if not raw:
        return ExpressionDescriptor()

    selector_part, separator, function_part = raw.partition(function_separator)
    selector = selector_part.strip()
    if not separator:
        return ExpressionDescriptor(selector=selector)

    match = _FUNCTION_RE.match(function_part)
    if match is None:
        logger.debug("Expression `%s` has no valid function call after %r, using selector only", raw, function_separator)
        return ExpressionDescriptor(selector=selector)

    arguments = tokenize(match.group(3)) if match.group(3) is not None else []
    return ExpressionDescriptor(selector=selector, function_name=match.group(1), arguments=tuple(arguments))


class ExpressionCache:
    """Parse-once memo of descriptors keyed by the exact raw expression."""

    def __init__(self, function_separator: str = "->", *, debug: bool = False) -> None:
        self._function_separator = function_separator
        self._debug = debug
        self._entries: dict[str, ExpressionDescriptor] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, raw: object) -> bool:
        return raw in self._entries

    def get(self, raw: str) -> ExpressionDescriptor:
        cached = self._entries.get(raw)
        if cached is not None:
            return cached

        descriptor = parse_expression(raw, self._function_separator)
        with self._lock:
            stored = self._entries.setdefault(raw, descriptor)
        if stored is descriptor and self._debug:
            logger.info("Parsed expression `%s` -> %s", raw, descriptor)
        return stored
