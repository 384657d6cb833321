"""Shared sample page and record types used across the test suite."""

from __future__ import annotations

from dataclasses import dataclass, field

from pagebind import Selection, UInt, bind

SAMPLE_HTML = """
<!doctype html>
<html>
<head>
    <meta charset="utf-8">
    <title>Pagebind Example</title>
    <meta name="keywords" content="python, pagebind,html ,page,parser">
</head>
<body>
    <h1><u>Pagebind</u> H1 Title</h1>
    <div class="navlink">
        <div class="container">
            <ul class="clearfix">
                <li id=''><a href="/">Index</a></li>
                <li id='2'><a href="/list/web" title="web site">Web page</a></li>
                <li id='3'><a href="/list/pc" title="pc page">Pc Page</a></li>
                <li id='4'><a href="/list/mobile" title="mobile page">Mobile Page</a></li>
            </ul>
        </div>
    </div>
    <div class='words' show="true">A|B|C|D</div>
    <input name="feedback" value="pagebind@example.org" />
</body>
</html>
"""


@dataclass
class NavLink:
    name: str = bind("->text()", default="")
    url: str = bind("->attr(href)", default="")


@dataclass
class NavItem:
    id: int = bind("->attrEmpty(id, -1)", default=0)
    link: NavLink = bind("a", default_factory=NavLink)
    link_html: str = bind("a->html()", default="")
    parent_func_name: str = bind("a->ParentFunc()", default="")


@dataclass
class SubPage:
    text: str = bind("->text()", default="")
    sub_func_value: str = bind("->SubFunc()", default="")
    parent_func_value: str = bind("->ParentFunc()", default="")
    same_func_value: str = bind("->SameFunc()", default="")

    def SubFunc(self, node: Selection, *args: str) -> str:
        return "SubFunc-" + node.text()

    def SameFunc(self, node: Selection, *args: str) -> str:
        return "Sub-Same-Func-" + node.text()


@dataclass
class Page:
    title: str = bind("title", default="")
    keywords: list[str] = bind("meta[name='keywords']->attrSplit(content)", default_factory=list)
    h1: str = bind("h1", default="")
    h1_html: str = bind("h1->html()", default="")
    nav_list: list[NavItem] = bind(".navlink li", default_factory=list)
    nav_first_id: int = bind(".navlink li:first-child->attrEmpty(id, 0)", default=0)
    nav_last_id: UInt = bind(".navlink li:last-child->attr(id)", default=0)
    nav_texts: list[str] = bind(".navlink li", default_factory=list)
    nav_each_attr: list[str] = bind(".navlink li->eachAttr(id)", default_factory=list)
    nav_ids: list[int] = bind(".navlink li->attrEmpty(id, -1)", default_factory=list)
    nav_join: str = bind(".navlink li->eachTextJoin(|)", default="")
    words: list[str] = bind(".words->textSplit(|)", default_factory=list)
    words_show: bool = bind(".words->attrEmpty(show, false)", default=False)
    feedback: str = bind("input[name='feedback']->value()", default="")
    same_func_value: str = bind("h1->SameFunc()", default="")
    sub_page: SubPage | None = bind(".navlink li:last-child", default=None)
    sub_pages: list[SubPage] = bind(".navlink li", default_factory=list)
    nav_last: NavItem = bind(".navlink li->last()", default_factory=NavItem)
    skipped: str = bind("-", default="untouched")
    untagged: list[str] = field(default_factory=list)

    def ParentFunc(self, node: Selection, *args: str) -> str:
        return "ParentFunc-" + node.text()

    def same_func(self, node: Selection, *args: str) -> str:
        return "Page-Same-Func-" + node.text()
