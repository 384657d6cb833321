"""Argument lexer for function call expressions such as `attr(href, '#')`."""

from __future__ import annotations

from pagebind.errors import ExpressionSyntaxError

_QUOTES = ("'", '"')
_ESCAPE = "\\"


def _finish_token(literal: list[str], bare: list[str], quoted: bool) -> str:
    trailing = "".join(bare).strip()
    if quoted:
        return "".join(literal) + trailing
    return trailing


def tokenize(text: str) -> list[str]:
    """Split raw argument text into argument strings.

    Commas outside a quoted literal separate tokens, and every such comma
    closes a token, so `a,,b` yields an empty middle token. A quote opens a
    literal only at the start of a token; inside it the matching quote can be
    escaped with a backslash. Bare tokens are trimmed, literal content is kept
    verbatim. Trailing text is emitted when it is non-blank or quoted.
    """

    tokens: list[str] = []
    literal: list[str] = []
    bare: list[str] = []
    quote: str | None = None
    quoted = False

    pos = 0
    size = len(text)
    while pos < size:
        ch = text[pos]

        if quote is not None:
            if ch == _ESCAPE and pos + 1 < size and text[pos + 1] == quote:
                literal.append(quote)
                pos += 2
                continue
            if ch == quote:
                quote = None
            else:
                literal.append(ch)
            pos += 1
            continue

        if ch in _QUOTES and not quoted and not "".join(bare).strip():
            quote = ch
            quoted = True
            bare.clear()
        elif ch == ",":
            tokens.append(_finish_token(literal, bare, quoted))
            literal.clear()
            bare.clear()
            quoted = False
        else:
            bare.append(ch)
        pos += 1

    if quote is not None:
        raise ExpressionSyntaxError(text, f"quoted literal opened with {quote} is not closed")

    if quoted or "".join(bare).strip():
        tokens.append(_finish_token(literal, bare, quoted))
    return tokens
