"""tree-sitter adapter: grammars, parsing and byte to character offsets."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

import tree_sitter_html as ts_html
import tree_sitter_javascript as ts_javascript
import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

from i18n_core.rewrite.models import SourcePosition
from i18n_core.utils.errors import ExtractionParseError

Grammar = Literal["javascript", "typescript", "tsx", "html"]

_SNIPPET_WIDTH = 40


@lru_cache(maxsize=None)
def get_language(grammar: Grammar) -> Language:
    if grammar == "javascript":
        return Language(ts_javascript.language())
    if grammar == "typescript":
        return Language(ts_typescript.language_typescript())
    if grammar == "tsx":
        return Language(ts_typescript.language_tsx())
    if grammar == "html":
        return Language(ts_html.language())
    raise ValueError(f"Unsupported grammar: {grammar}")


def grammar_for_lang(lang: str | None, *, jsx: bool = False) -> Grammar:
    """Map a script ``lang`` attribute or file type onto a grammar name."""

    normalized = (lang or "js").lower()
    if normalized in {"ts", "typescript", "mts", "cts"}:
        return "tsx" if jsx else "typescript"
    if normalized == "tsx":
        return "tsx"
    return "javascript"


class SourceDocument:
    """Parsed source text with character offsets for tree-sitter nodes.

    tree-sitter reports UTF-8 byte offsets; every span produced by the walkers
    is expressed in characters of ``text``.
    """

    def __init__(self, text: str, tree: Tree, grammar: Grammar) -> None:
        self.text = text
        self.tree = tree
        self.grammar = grammar
        self._char_at_byte = _build_offset_table(text)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def char_offset(self, byte_offset: int) -> int:
        if self._char_at_byte is None:
            return byte_offset
        return self._char_at_byte[byte_offset]

    def position(self, node: Node) -> SourcePosition:
        return SourcePosition(self.char_offset(node.start_byte), self.char_offset(node.end_byte))

    def node_text(self, node: Node) -> str:
        position = self.position(node)
        return self.text[position.start : position.end]


def parse_source(text: str, grammar: Grammar) -> SourceDocument:
    """Parse ``text`` and fail on any syntax error.

    Raises:
        ExtractionParseError: the tree contains ERROR or MISSING nodes.
    """

    parser = Parser(get_language(grammar))
    tree = parser.parse(text.encode("utf-8"))
    document = SourceDocument(text, tree, grammar)
    if document.root.has_error:
        broken = _first_error(document.root)
        position = None
        snippet = None
        if broken is not None:
            row, column = broken.start_point
            position = (row + 1, column + 1)
            start = document.char_offset(broken.start_byte)
            snippet = text[start : start + _SNIPPET_WIDTH]
        raise ExtractionParseError(
            f"Failed to parse source as {grammar}"
            + (f" at line {position[0]}, column {position[1]}" if position else ""),
            grammar=grammar,
            position=position,
            snippet=snippet,
        )
    return document


def _first_error(node: Node) -> Node | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _build_offset_table(text: str) -> list[int] | None:
    if text.isascii():
        return None
    table: list[int] = []
    for index, char in enumerate(text):
        table.extend([index] * len(char.encode("utf-8")))
    table.append(len(text))
    return table
