from __future__ import annotations

import pytest

from pagebind.functions.builtins import BUILTIN_FUNCTIONS
from pagebind.selection import Selection

_HTML = """
<html><body>
  <h1> Title <u>here</u> </h1>
  <ul>
    <li id="1" data-tags="a, b ,c"><a href="/one">One</a></li>
    <li id=""><a href="https://other.example/two">Two</a></li>
    <li><a>  </a></li>
  </ul>
  <p class="csv">x| y |z</p>
  <input name="q" value="search me">
</body></html>
"""


def _call(selector: str, name: str, *args: str) -> object:
    node = Selection.from_html(_HTML).find(selector)
    return BUILTIN_FUNCTIONS[name](node, *args)


def test_text_html_outer_html_value_and_size() -> None:
    assert _call("h1", "text") == "Title here"
    assert _call("h1", "html").strip() == "Title <u>here</u>"
    assert _call("li a", "outerHtml") == '<a href="/one">One</a>'
    assert _call("input", "value") == "search me"
    assert _call("li", "size") == 3


def test_attribute_functions() -> None:
    assert _call("li", "attr", "id") == "1"
    assert _call("li a", "attr", "title", "none") == "none"
    assert _call("li:nth-child(2)", "attrEmpty", "id", "-1") == "-1"
    assert _call("li:nth-child(3)", "attrEmpty", "id", "0") == "0"
    assert _call("li", "attrConcat", "id", "#", "$value", "!") == "#1!"
    assert _call("li", "attrSplit", "data-tags") == ["a", "b", "c"]
    assert _call("li", "attrSplit", "data-tags", ",", "false") == ["a", " b ", "c"]


def test_abs_href_resolves_against_base_url() -> None:
    assert _call("li a", "absHref", "https://example.com/base/") == "https://example.com/one"
    assert _call("li:nth-child(2) a", "absHref", "https://example.com/") == "https://other.example/two"
    with pytest.raises(ValueError):
        _call("li a", "absHref", "not a url")


def test_each_functions_follow_document_order() -> None:
    assert _call("li", "eachAttr", "id") == ["1", "", ""]
    assert _call("li", "eachAttrEmpty", "id", "-") == ["1", "-", "-"]
    assert _call("li", "eachText") == ["One", "Two", ""]
    assert _call("li", "eachTextEmpty", "n/a") == ["One", "Two", "n/a"]
    assert _call("li", "eachTextJoin", "|") == "One|Two|"
    assert _call("li", "eachTextJoin") == "One,Two,"
    assert _call("li a", "eachHtml") == ["One", "Two", "  "]
    assert _call("li a", "eachOutHtml")[1] == '<a href="https://other.example/two">Two</a>'


def test_eq_and_functions() -> None:
    assert _call("li a", "eqAndAttr", "1", "href") == "https://other.example/two"
    assert _call("li", "eqAndText", "-3") == "One"
    assert _call("li", "eqAndHtml", "0") == '<a href="/one">One</a>'
    assert _call("li a", "eqAndOutHtml", "9") == ""


def test_text_variants() -> None:
    assert _call("h1", "textConcat", "[", "$value", "]") == "[Title here]"
    assert _call("li:nth-child(3)", "textEmpty", "empty") == "empty"
    assert _call("p.csv", "textSplit", "|") == ["x", "y", "z"]
    assert _call("p.csv", "textSplit", "|", "0") == ["x", " y ", "z"]


def test_argument_errors_raise_value_error() -> None:
    failing = [
        ("attr",),
        ("attrEmpty", "id"),
        ("attrConcat", "id", "x"),
        ("attrSplit",),
        ("absHref",),
        ("eachAttr",),
        ("eachAttrEmpty", "id"),
        ("eachTextEmpty",),
        ("eqAndAttr", "0"),
        ("eqAndText", "first"),
        ("eqAndHtml",),
        ("textConcat", "only"),
        ("textEmpty",),
        ("textSplit", ",", "sometimes"),
    ]
    for name, *args in failing:
        with pytest.raises(ValueError):
            _call("li", name, *args)
