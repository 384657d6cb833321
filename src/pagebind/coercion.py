"""Conversion of dynamically typed function results into declared field types."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Callable

from pagebind.errors import CastError
from pagebind.selection import Selection

logger = logging.getLogger(__name__)

_TRUE_TEXT = {"true", "t", "1", "yes", "y", "on"}
_FALSE_TEXT = {"false", "f", "0", "no", "n", "off", ""}


class ScalarKind(Enum):
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STR = "str"
    OPAQUE = "opaque"


def zero_value(kind: ScalarKind) -> object:
    """Value a field of `kind` holds when nothing could be converted."""

    return _ZERO_VALUES[kind]


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
        raise ValueError(f"{value!r} is not a boolean literal")
    raise TypeError(f"{type(value).__name__} is not convertible to bool")


def _to_int(value: object) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} has a fractional part")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            return _to_int(float(text))
    raise TypeError(f"{type(value).__name__} is not convertible to int")


def _to_uint(value: object) -> int:
    number = _to_int(value)
    if number < 0:
        raise ValueError(f"{number} is negative")
    return number


def _to_float(value: object) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"{type(value).__name__} is not convertible to float")


def _to_str(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    raise TypeError(f"{type(value).__name__} is not convertible to str")


_CONVERTERS: dict[ScalarKind, Callable[[object], object]] = {
    ScalarKind.BOOL: _to_bool,
    ScalarKind.INT: _to_int,
    ScalarKind.UINT: _to_uint,
    ScalarKind.FLOAT: _to_float,
    ScalarKind.STR: _to_str,
}

_ZERO_VALUES: dict[ScalarKind, object] = {
    ScalarKind.BOOL: False,
    ScalarKind.INT: 0,
    ScalarKind.UINT: 0,
    ScalarKind.FLOAT: 0.0,
    ScalarKind.STR: "",
    ScalarKind.OPAQUE: None,
}


def coerce(value: object, kind: ScalarKind, strict: bool = False) -> object:
    """Convert `value` to `kind`.

    Strict mode raises CastError when the conversion is impossible or lossy;
    lenient mode returns the kind's zero value instead.
    """

    if kind is ScalarKind.OPAQUE:
        return value

    source = value.text().strip() if isinstance(value, Selection) else value
    try:
        return _CONVERTERS[kind](source)
    except (TypeError, ValueError, OverflowError, UnicodeDecodeError) as exc:
        if strict:
            raise CastError(value, type(value).__name__, kind.value) from exc
        logger.debug("Lenient cast of %r to %s fell back to zero value: %s", value, kind.value, exc)
        return _ZERO_VALUES[kind]


def coerce_sequence(value: object, item_kind: ScalarKind, strict: bool = False) -> list[object]:
    """Convert `value` into a list whose items are all of `item_kind`."""

    if value is None:
        return []
    if isinstance(value, Selection):
        items: list[object] = list(value.each())
    elif isinstance(value, (str, bytes)):
        items = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        if strict:
            raise CastError(value, type(value).__name__, f"list[{item_kind.value}]")
        logger.debug("Lenient cast of %r to list[%s] fell back to empty list", value, item_kind.value)
        return []

    if not strict:
        # unconvertible items become zero values one by one
        return [coerce(item, item_kind) for item in items]
    try:
        return [coerce(item, item_kind, strict=True) for item in items]
    except CastError as exc:
        raise CastError(value, type(value).__name__, f"list[{item_kind.value}]") from exc
