"""BeautifulSoup-backed node sets handed to the mapper and to transformation functions."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag
import soupsieve
from soupsieve import SelectorSyntaxError

from pagebind.errors import SelectorError

DEFAULT_PARSER = "lxml"


@runtime_checkable
class NodeSet(Protocol):
    """Minimal node-set contract the mapper relies on."""

    def find(self, selector: str) -> "NodeSet":
        """Return descendants of every node matching `selector`."""

    def each(self) -> list["NodeSet"]:
        """Split into single-node sets in document order."""

    def size(self) -> int:
        """Number of nodes in the set."""

    def text(self) -> str:
        """Combined text content of every node."""

    def html(self) -> str:
        """Inner markup of the first node."""

    def outer_html(self) -> str:
        """Markup of the first node including its own tag."""

    def attribute(self, name: str, default: str = "") -> str:
        """Attribute of the first node, or `default` when absent."""


def _unique(nodes: Iterable[Tag]) -> tuple[Tag, ...]:
    seen: set[int] = set()
    ordered: list[Tag] = []
    for node in nodes:
        if id(node) in seen:
            continue
        seen.add(id(node))
        ordered.append(node)
    return tuple(ordered)


def _is_element(node: object) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def _attribute_text(raw: object) -> str:
    # bs4 keeps multi-valued attributes such as `class` as lists
    if isinstance(raw, (list, tuple)):
        return " ".join(str(part) for part in raw)
    return str(raw)


class Selection:
    """Ordered, duplicate-free set of document nodes."""

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable[Tag] = ()) -> None:
        self._nodes = _unique(nodes)

    @classmethod
    def from_html(cls, markup: str | bytes, parser: str = DEFAULT_PARSER) -> "Selection":
        """Parse markup and return the selection holding the document root."""

        return cls([BeautifulSoup(markup, parser)])

    @classmethod
    def from_file(cls, path: str | Path, parser: str = DEFAULT_PARSER) -> "Selection":
        return cls.from_html(Path(path).read_bytes(), parser)

    @property
    def nodes(self) -> tuple[Tag, ...]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator["Selection"]:
        return iter(self.each())

    def __repr__(self) -> str:
        names = ", ".join(node.name or "?" for node in self._nodes[:5])
        suffix = ", ..." if len(self._nodes) > 5 else ""
        return f"Selection([{names}{suffix}])"

    def size(self) -> int:
        return len(self._nodes)

    def each(self) -> list["Selection"]:
        return [Selection([node]) for node in self._nodes]

    def find(self, selector: str) -> "Selection":
        try:
            matches = [match for node in self._nodes for match in node.select(selector)]
        except SelectorSyntaxError as exc:
            raise SelectorError(f"invalid selector {selector!r}: {exc}") from exc
        return Selection(matches)

    def filter(self, selector: str) -> "Selection":
        """Keep only nodes matching `selector`; an empty selector keeps everything."""

        if not selector:
            return self
        try:
            matches = [node for node in self._nodes if soupsieve.match(selector, node)]
        except SelectorSyntaxError as exc:
            raise SelectorError(f"invalid selector {selector!r}: {exc}") from exc
        return Selection(matches)

    def text(self) -> str:
        return "".join(node.get_text() for node in self._nodes)

    def html(self) -> str:
        if not self._nodes:
            return ""
        return self._nodes[0].decode_contents()

    def outer_html(self) -> str:
        if not self._nodes:
            return ""
        return str(self._nodes[0])

    def attribute(self, name: str, default: str = "") -> str:
        if not self._nodes:
            return default
        raw = self._nodes[0].get(name)
        if raw is None:
            return default
        return _attribute_text(raw)

    def has_attribute(self, name: str) -> bool:
        return bool(self._nodes) and self._nodes[0].has_attr(name)

    def eq(self, index: int) -> "Selection":
        """Reduce to the node at `index`; negative indexes count from the end."""

        if index < 0:
            index += len(self._nodes)
        if index < 0 or index >= len(self._nodes):
            return Selection()
        return Selection([self._nodes[index]])

    def first(self) -> "Selection":
        return self.eq(0)

    def last(self) -> "Selection":
        return self.eq(-1)

    def children(self, selector: str = "") -> "Selection":
        nodes = [child for node in self._nodes for child in node.children if isinstance(child, Tag)]
        return Selection(nodes).filter(selector)

    def next(self, selector: str = "") -> "Selection":
        nodes = []
        for node in self._nodes:
            sibling = next((item for item in node.next_siblings if isinstance(item, Tag)), None)
            if sibling is not None:
                nodes.append(sibling)
        return Selection(nodes).filter(selector)

    def prev(self, selector: str = "") -> "Selection":
        nodes = []
        for node in self._nodes:
            sibling = next((item for item in node.previous_siblings if isinstance(item, Tag)), None)
            if sibling is not None:
                nodes.append(sibling)
        return Selection(nodes).filter(selector)

    def parent(self, selector: str = "") -> "Selection":
        nodes = [node.parent for node in self._nodes if _is_element(node.parent)]
        return Selection(nodes).filter(selector)

    def parents(self, selector: str = "") -> "Selection":
        nodes = [ancestor for node in self._nodes for ancestor in node.parents if _is_element(ancestor)]
        return Selection(nodes).filter(selector)

    def parents_until(self, selector: str) -> "Selection":
        """Ancestors of each node up to, but excluding, the first one matching `selector`."""

        nodes: list[Tag] = []
        try:
            for node in self._nodes:
                for ancestor in node.parents:
                    if not _is_element(ancestor) or soupsieve.match(selector, ancestor):
                        break
                    nodes.append(ancestor)
        except SelectorSyntaxError as exc:
            raise SelectorError(f"invalid selector {selector!r}: {exc}") from exc
        return Selection(nodes)

    def siblings(self, selector: str = "") -> "Selection":
        nodes = []
        for node in self._nodes:
            parent = node.parent
            if parent is None:
                continue
            nodes.extend(item for item in parent.children if isinstance(item, Tag) and item is not node)
        return Selection(nodes).filter(selector)
