"""Normalization helpers for literal values taken from source text."""

from __future__ import annotations

import re

_QUOTE_CHARS = "'\"`"
_EDGE_QUOTES_RE = re.compile(r"^['\"`]+|['\"`]+$")
_JS_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}
_STRING_LITERAL_RE = re.compile(
    r"""^\s*(?:'(?:[^'\\\n]|\\.)*'|"(?:[^"\\\n]|\\.)*"|`(?:[^`\\$]|\\.|\$(?!\{))*`)\s*$""",
    re.S,
)


def format_value(value: object) -> str:
    """Strip matching quote characters wrapped around a literal value.

    Only applies when the first and last characters are equal, so a value such
    as ``'Hello"`` is returned unchanged.
    """

    text = value if isinstance(value, str) else ""
    if text and text[0] == text[-1] and text[0] in _QUOTE_CHARS:
        text = _EDGE_QUOTES_RE.sub("", text)
    return text


def remove_brackets(text: str) -> str:
    """Remove one leading "(" and one trailing ")"."""

    if text.startswith("("):
        text = text[1:]
    if text.endswith(")"):
        text = text[:-1]
    return text


def is_string_literal(expression: str) -> bool:
    """Return True when expression is exactly one quoted string literal."""

    return bool(_STRING_LITERAL_RE.match(expression))


def literal_value(expression: str) -> str:
    """Return the cooked value of a single quoted string literal."""

    stripped = expression.strip()
    return unescape_js_string(stripped[1:-1])


def unescape_js_string(raw: str) -> str:
    """Cook JavaScript escape sequences in the body of a string literal."""

    if "\\" not in raw:
        return raw

    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token in _LINE_CONTINUATIONS:
            return ""
        if token.startswith("u{"):
            return chr(int(token[2:-1], 16))
        if token.startswith("u") and len(token) == 5:
            return chr(int(token[1:], 16))
        if token.startswith("x") and len(token) == 3:
            return chr(int(token[1:], 16))
        return _SIMPLE_ESCAPES.get(token, token)

    cooked = _JS_ESCAPE_RE.sub(_replace, raw)
    # \uD83D\uDE00 style pairs arrive as lone surrogates.
    return cooked.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def collapse_newlines(text: str) -> str:
    """Collapse line breaks and their surrounding spaces into one space."""

    return re.sub(r" *\r?\n *", " ", text)
