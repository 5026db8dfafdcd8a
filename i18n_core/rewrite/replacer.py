"""Offset-based text rewriting.

Spans are applied against the original text in one left-to-right pass, so no
offset needs adjusting after a substitution and the source is never reparsed.
"""

from __future__ import annotations

from collections.abc import Iterable

from i18n_core.rewrite.models import ReplacementSpan
from i18n_core.utils.errors import InvalidSpanError, SpanOverlapError


def sort_spans(spans: Iterable[ReplacementSpan]) -> list[ReplacementSpan]:
    """Sort spans by start offset, zero-width spans first on a shared start."""

    return sorted(spans, key=lambda span: (span.start, span.end))


def apply_replacements(original: str, spans: Iterable[ReplacementSpan]) -> str:
    """Apply sorted, non-overlapping spans to ``original``.

    Rules:
    - spans must be ordered by ``start``;
    - ``spans[i].end <= spans[i + 1].start`` (touching is allowed);
    - every span satisfies ``0 <= start <= end <= len(original)``.

    Raises:
        InvalidSpanError: a span is out of range or out of order.
        SpanOverlapError: two spans cover the same characters.
    """

    chunks: list[str] = []
    cursor = 0
    previous: ReplacementSpan | None = None
    length = len(original)

    for span in spans:
        if span.start < 0 or span.end < span.start or span.end > length:
            raise InvalidSpanError(
                f"Span [{span.start}, {span.end}) is outside text of length {length}",
                span=span,
            )
        if previous is not None:
            if span.start < previous.start:
                raise InvalidSpanError(
                    f"Span [{span.start}, {span.end}) is not sorted after "
                    f"[{previous.start}, {previous.end})",
                    span=span,
                )
            if span.start < previous.end:
                raise SpanOverlapError(
                    f"Span [{span.start}, {span.end}) overlaps "
                    f"[{previous.start}, {previous.end})",
                    previous=previous,
                    current=span,
                )

        chunks.append(original[cursor : span.start])
        chunks.append(span.replacement)
        cursor = span.end
        previous = span

    chunks.append(original[cursor:])
    return "".join(chunks)
