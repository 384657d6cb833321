"""Optional functions backed by extra dependencies.

They are not part of the default registry; register them on an engine:

    engine = Engine()
    register_markdown(engine)      # needs the `markdown` extra (markdownify)
    register_ugc_html(engine)      # needs the `ugc` extra (nh3)
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pagebind.selection import Selection

if TYPE_CHECKING:
    from pagebind.engine import Engine

_BLANK_LINES_RE = re.compile(r"(\r?\n+\s*){2,}")


def markdown(node: Selection, *args: str) -> str:
    """markdown() -> inner markup of the first node converted to Markdown."""

    from markdownify import markdownify

    converted = markdownify(node.html(), heading_style="ATX")
    return _BLANK_LINES_RE.sub("\n\n", converted).strip()


def ugc_html(node: Selection, *args: str) -> str:
    """ugcHtml() -> markup of the first node with scripts and unsafe attributes removed."""

    import nh3

    return nh3.clean(node.outer_html())


def register_markdown(engine: Engine, name: str = "markdown") -> None:
    engine.register_function(name, markdown)


def register_ugc_html(engine: Engine, name: str = "ugcHtml") -> None:
    engine.register_function(name, ugc_html)
