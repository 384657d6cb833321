"""Built-in functions that redirect a field to another node set.

They return a Selection, so the mapper keeps descending structurally
instead of assigning a leaf value:

    @dataclass
    class Page:
        last_nav: Nav = bind(".nav li->last()", default_factory=Nav)
"""

from __future__ import annotations

from typing import Sequence

from pagebind.functions.builtins import parse_index
from pagebind.functions.registry import node_set_function
from pagebind.selection import Selection


def _selector_arg(args: Sequence[str]) -> str:
    return args[0].strip() if args else ""


@node_set_function
def child(node: Selection, *args: str) -> Selection:
    return node.children(_selector_arg(args))


@node_set_function
def eq(node: Selection, *args: str) -> Selection:
    if not args:
        raise ValueError("eq(index) requires an index")
    return node.eq(parse_index(args[0]))


@node_set_function
def first(node: Selection, *args: str) -> Selection:
    return node.first()


@node_set_function
def last(node: Selection, *args: str) -> Selection:
    return node.last()


@node_set_function
def next_sibling(node: Selection, *args: str) -> Selection:
    return node.next(_selector_arg(args))


@node_set_function
def prev_sibling(node: Selection, *args: str) -> Selection:
    return node.prev(_selector_arg(args))


@node_set_function
def parent(node: Selection, *args: str) -> Selection:
    return node.parent(_selector_arg(args))


@node_set_function
def parents(node: Selection, *args: str) -> Selection:
    return node.parents(_selector_arg(args))


@node_set_function
def parents_until(node: Selection, *args: str) -> Selection:
    selector = _selector_arg(args)
    if not selector:
        raise ValueError("parentsUntil(selector) requires a selector")
    return node.parents_until(selector)


@node_set_function
def siblings(node: Selection, *args: str) -> Selection:
    return node.siblings(_selector_arg(args))


BUILTIN_SELECTIONS = {
    "child": child,
    "eq": eq,
    "first": first,
    "last": last,
    "next": next_sibling,
    "parent": parent,
    "parents": parents,
    "parentsUntil": parents_until,
    "prev": prev_sibling,
    "siblings": siblings,
}
