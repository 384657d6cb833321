"""Function registry and the record-first resolution protocol."""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
import inspect
import logging
import re
import threading
from typing import Callable, Iterable, Mapping, Protocol, Sequence, runtime_checkable
import weakref

from pagebind.errors import (
    FunctionCallError,
    FunctionNotFoundError,
    InvalidFunctionSignatureError,
)
from pagebind.selection import Selection

logger = logging.getLogger(__name__)

TransformFunction = Callable[..., object]
"""Called as `fn(node, *args)`; returns a value, a `(value, error)` pair, or raises."""

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")
_NODE_SET_MARKER = "__pagebind_node_set__"

_signatures: "weakref.WeakKeyDictionary[object, inspect.Signature | None]" = weakref.WeakKeyDictionary()
_signatures_lock = threading.Lock()


@runtime_checkable
class Dispatchable(Protocol):
    """Records implementing this decide themselves which callable serves a name."""

    def resolve_method(self, name: str) -> TransformFunction | None:
        ...


class FunctionOrigin(Enum):
    RECORD = "record"
    ANCESTOR = "ancestor"
    REGISTRY = "registry"


@dataclass(frozen=True, slots=True)
class ResolvedFunction:
    name: str
    function: TransformFunction
    origin: FunctionOrigin


class FunctionRegistry:
    """Name to function map owned by one engine; safe for concurrent use."""

    def __init__(self, functions: Mapping[str, TransformFunction] | None = None) -> None:
        self._functions: dict[str, TransformFunction] = dict(functions or {})
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def register(self, name: str, function: TransformFunction) -> None:
        """Register `function` under `name`, replacing any previous entry."""

        if not name:
            raise ValueError("Function name cannot be empty")
        if not callable(function):
            raise ValueError(f"Function registered as `{name}` is not callable")
        with self._lock:
            replaced = name in self._functions
            self._functions[name] = function
        if replaced:
            logger.debug("Replaced registered function `%s`", name)

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._functions.pop(name, None) is not None

    def get(self, name: str) -> TransformFunction | None:
        return self._functions.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._functions)


def node_set_function(function: TransformFunction) -> TransformFunction:
    """Mark `function` as reading the whole node set of a list field.

    Unmarked functions bound to a list of scalars are called once per node.
    """

    setattr(function, _NODE_SET_MARKER, True)
    return function


def consumes_node_set(function: TransformFunction) -> bool:
    return bool(getattr(function, _NODE_SET_MARKER, False))


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def find_method(record: object, name: str) -> TransformFunction | None:
    """Look up a method named `name` (or its snake_case form) on a record."""

    if isinstance(record, Dispatchable):
        return record.resolve_method(name)

    field_names = {item.name for item in fields(record)} if is_dataclass(record) else set()
    for candidate in dict.fromkeys((name, snake_case(name))):
        if candidate.startswith("_") or candidate in field_names:
            continue
        method = getattr(record, candidate, None)
        if callable(method):
            return method
    return None


def resolve_function(
    name: str,
    record: object,
    ancestors: Sequence[object],
    registry: FunctionRegistry,
) -> ResolvedFunction:
    """Find the function for `name`: record, then ancestors innermost first, then registry."""

    method = find_method(record, name)
    if method is not None:
        return ResolvedFunction(name, method, FunctionOrigin.RECORD)

    for ancestor in reversed(ancestors):
        method = find_method(ancestor, name)
        if method is not None:
            return ResolvedFunction(name, method, FunctionOrigin.ANCESTOR)

    function = registry.get(name)
    if function is not None:
        return ResolvedFunction(name, function, FunctionOrigin.REGISTRY)
    raise FunctionNotFoundError(name)


def _signature(function: TransformFunction) -> tuple[inspect.Signature | None, bool]:
    """Signature of the underlying function and whether it is a bound method."""

    target = getattr(function, "__func__", function)
    bound = target is not function
    try:
        return _signatures[target], bound
    except KeyError:
        pass
    except TypeError:
        # not weakly referenceable, e.g. builtins
        return _compute_signature(target), bound

    signature = _compute_signature(target)
    with _signatures_lock:
        _signatures[target] = signature
    return signature, bound


def _compute_signature(function: object) -> inspect.Signature | None:
    try:
        return inspect.signature(function)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _check_signature(resolved: ResolvedFunction, arguments: Sequence[str]) -> None:
    signature, bound = _signature(resolved.function)
    if signature is None:
        return
    leading = (None, None) if bound else (None,)
    try:
        signature.bind(*leading, *arguments)
    except TypeError as exc:
        raise InvalidFunctionSignatureError(
            resolved.name,
            f"cannot be called with a node and {len(arguments)} argument(s): {exc}",
        ) from exc


def invoke(resolved: ResolvedFunction, node: Selection, arguments: Iterable[str]) -> object:
    """Call a resolved function and unwrap its result.

    A two-item tuple whose second item is an exception or None is read as a
    `(value, error)` pair; an empty tuple means the function returned nothing.
    """

    args = list(arguments)
    _check_signature(resolved, args)
    try:
        outcome = resolved.function(node, *args)
    except Exception as exc:
        raise FunctionCallError(resolved.name, exc) from exc

    if isinstance(outcome, tuple):
        if not outcome:
            raise InvalidFunctionSignatureError(resolved.name, "returned no value")
        if len(outcome) == 2 and (outcome[1] is None or isinstance(outcome[1], BaseException)):
            value, error = outcome
            if error is not None:
                raise FunctionCallError(resolved.name, error) from error
            return value
    return outcome
