"""Built-in value functions available to every expression, e.g. `a->attr(href)`."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urljoin, urlparse

from pagebind.coercion import ScalarKind, coerce
from pagebind.errors import CastError
from pagebind.functions.registry import node_set_function
from pagebind.selection import Selection

VALUE_PLACEHOLDER = "$value"


def _require(args: Sequence[str], count: int, usage: str) -> None:
    if len(args) < count:
        raise ValueError(f"{usage} requires at least {count} argument(s)")


def parse_index(raw: str) -> int:
    value = raw.strip()
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"index=`{value}` is not a number") from exc


def _parse_trim(raw: str) -> bool:
    try:
        return bool(coerce(raw, ScalarKind.BOOL, strict=True))
    except CastError as exc:
        raise ValueError("`trim` must be a boolean value: true/false") from exc


def _split(text: str, sep: str, trim: bool) -> list[str]:
    parts = text.split(sep) if sep else list(text)
    if trim:
        return [part.strip() for part in parts]
    return parts


def _concat(value: str, parts: Sequence[str]) -> str:
    return "".join(value if part == VALUE_PLACEHOLDER else part for part in parts)


def text(node: Selection, *args: str) -> str:
    """text() -> trimmed text of the node set."""

    return node.text().strip()


def html(node: Selection, *args: str) -> str:
    """html() -> inner markup of the first node."""

    return node.html()


def outer_html(node: Selection, *args: str) -> str:
    """outerHtml() -> markup of the first node including its tag."""

    return node.outer_html()


def value(node: Selection, *args: str) -> str:
    """value() -> the `value` attribute, mostly for form inputs."""

    return node.attribute("value", "")


@node_set_function
def size(node: Selection, *args: str) -> int:
    """size() -> number of nodes in the set."""

    return node.size()


def attr(node: Selection, *args: str) -> str:
    """attr(name, default='') -> attribute of the first node."""

    _require(args, 1, "attr(name)")
    default = args[1] if len(args) > 1 else ""
    return node.attribute(args[0], default)


def attr_empty(node: Selection, *args: str) -> str:
    """attrEmpty(name, default) -> trimmed attribute, `default` when missing or blank."""

    _require(args, 2, "attrEmpty(name, default)")
    name, default = args[0], args[1]
    found = node.attribute(name, default).strip()
    return found or default


def attr_concat(node: Selection, *args: str) -> str:
    """attrConcat(name, text1, $value, ...) -> joins the parts, `$value` is the attribute."""

    _require(args, 3, "attrConcat(name, text1, $value, [text2, ...])")
    found = node.attribute(args[0], "").strip()
    return _concat(found, args[1:])


def attr_split(node: Selection, *args: str) -> list[str]:
    """attrSplit(name, sep=',', trim='true') -> attribute split into a list."""

    _require(args, 1, "attrSplit(name)")
    sep = args[1] if len(args) > 1 else ","
    trim = _parse_trim(args[2]) if len(args) > 2 else True
    return _split(node.attribute(args[0], ""), sep, trim)


def abs_href(node: Selection, *args: str) -> str:
    """absHref(baseUrl) -> `href` resolved against `baseUrl`."""

    _require(args, 1, "absHref(baseUrl)")
    base_url = args[0].strip()
    parsed = urlparse(base_url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"invalid base url: {base_url!r}")
    return urljoin(base_url, node.attribute("href", "").strip())


@node_set_function
def each_attr(node: Selection, *args: str) -> list[str]:
    _require(args, 1, "eachAttr(name)")
    return [item.attribute(args[0], "").strip() for item in node.each()]


@node_set_function
def each_attr_empty(node: Selection, *args: str) -> list[str]:
    _require(args, 2, "eachAttrEmpty(name, default)")
    name, default = args[0], args[1]
    return [item.attribute(name, "").strip() or default for item in node.each()]


@node_set_function
def each_text(node: Selection, *args: str) -> list[str]:
    return [item.text().strip() for item in node.each()]


@node_set_function
def each_text_empty(node: Selection, *args: str) -> list[str]:
    _require(args, 1, "eachTextEmpty(default)")
    return [item.text().strip() or args[0] for item in node.each()]


@node_set_function
def each_text_join(node: Selection, *args: str) -> str:
    sep = args[0] if args else ","
    return sep.join(item.text().strip() for item in node.each())


@node_set_function
def each_html(node: Selection, *args: str) -> list[str]:
    return [item.html() for item in node.each()]


@node_set_function
def each_outer_html(node: Selection, *args: str) -> list[str]:
    return [item.outer_html() for item in node.each()]


@node_set_function
def eq_and_attr(node: Selection, *args: str) -> str:
    _require(args, 2, "eqAndAttr(index, name)")
    return node.eq(parse_index(args[0])).attribute(args[1].strip(), "")


@node_set_function
def eq_and_html(node: Selection, *args: str) -> str:
    _require(args, 1, "eqAndHtml(index)")
    return node.eq(parse_index(args[0])).html()


@node_set_function
def eq_and_outer_html(node: Selection, *args: str) -> str:
    _require(args, 1, "eqAndOutHtml(index)")
    return node.eq(parse_index(args[0])).outer_html()


@node_set_function
def eq_and_text(node: Selection, *args: str) -> str:
    _require(args, 1, "eqAndText(index)")
    return node.eq(parse_index(args[0])).text().strip()


def text_concat(node: Selection, *args: str) -> str:
    """textConcat(text1, $value, ...) -> joins the parts, `$value` is the node text."""

    _require(args, 2, "textConcat(text1, $value, [text2, ...])")
    return _concat(node.text().strip(), args)


def text_empty(node: Selection, *args: str) -> str:
    _require(args, 1, "textEmpty(default)")
    return node.text().strip() or args[0]


def text_split(node: Selection, *args: str) -> list[str]:
    """textSplit(sep=',', trim='true') -> node text split into a list."""

    sep = args[0] if args else ","
    trim = _parse_trim(args[1]) if len(args) > 1 else True
    return _split(node.text(), sep, trim)


BUILTIN_FUNCTIONS = {
    "absHref": abs_href,
    "attr": attr,
    "attrConcat": attr_concat,
    "attrEmpty": attr_empty,
    "attrSplit": attr_split,
    "eachAttr": each_attr,
    "eachAttrEmpty": each_attr_empty,
    "eachHtml": each_html,
    "eachOutHtml": each_outer_html,
    "eachText": each_text,
    "eachTextEmpty": each_text_empty,
    "eachTextJoin": each_text_join,
    "eqAndAttr": eq_and_attr,
    "eqAndHtml": eq_and_html,
    "eqAndOutHtml": eq_and_outer_html,
    "eqAndText": eq_and_text,
    "html": html,
    "outerHtml": outer_html,
    "size": size,
    "text": text,
    "textConcat": text_concat,
    "textEmpty": text_empty,
    "textSplit": text_split,
    "value": value,
}
