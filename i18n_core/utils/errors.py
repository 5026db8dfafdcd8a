"""Custom exceptions for core logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from i18n_core.rewrite.models import ReplacementSpan


class ExtractionParseError(Exception):
    """Raised when the parsing service reports a syntax error in the input."""

    def __init__(
        self,
        message: str,
        *,
        grammar: str,
        position: tuple[int, int] | None = None,
        snippet: str | None = None,
    ) -> None:
        super().__init__(message)
        self.grammar = grammar
        self.position = position
        self.snippet = snippet


class ExtractionDepthError(Exception):
    """Raised when a syntax tree is nested deeper than the configured limit."""

    def __init__(self, message: str, *, max_depth: int, node_kind: str | None = None) -> None:
        super().__init__(message)
        self.max_depth = max_depth
        self.node_kind = node_kind


class InvalidSpanError(ValueError):
    """Raised when a replacement span is out of range or out of order."""

    def __init__(self, message: str, *, span: ReplacementSpan) -> None:
        super().__init__(message)
        self.span = span


class SpanOverlapError(ValueError):
    """Raised when two replacement spans cover the same source range."""

    def __init__(
        self,
        message: str,
        *,
        previous: ReplacementSpan,
        current: ReplacementSpan,
    ) -> None:
        super().__init__(message)
        self.previous = previous
        self.current = current


class CatalogConflictError(ValueError):
    """Raised when a dotted key needs a branch where a leaf already exists."""

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key
