from __future__ import annotations

import pytest

from i18n_core.rewrite.models import ReplacementSpan
from i18n_core.rewrite.replacer import apply_replacements, sort_spans
from i18n_core.utils.errors import InvalidSpanError, SpanOverlapError


def test_apply_replacements_substitutes_in_order() -> None:
    original = 'a = "x"; b = "y"'
    spans = [ReplacementSpan(4, 7, "t('x')"), ReplacementSpan(13, 16, "t('y')")]

    assert apply_replacements(original, spans) == "a = t('x'); b = t('y')"


def test_apply_replacements_without_spans_returns_original() -> None:
    assert apply_replacements("unchanged", []) == "unchanged"


def test_touching_and_zero_width_spans_are_allowed() -> None:
    spans = [ReplacementSpan(0, 0, "<"), ReplacementSpan(0, 2, "AB"), ReplacementSpan(2, 4, "CD")]

    assert apply_replacements("abcd", spans) == "<ABCD"


def test_overlapping_spans_are_rejected() -> None:
    spans = [ReplacementSpan(0, 3, "x"), ReplacementSpan(2, 4, "y")]

    with pytest.raises(SpanOverlapError) as exc_info:
        apply_replacements("abcdef", spans)

    assert exc_info.value.previous == spans[0]
    assert exc_info.value.current == spans[1]


def test_unsorted_spans_are_rejected() -> None:
    spans = [ReplacementSpan(3, 4, "x"), ReplacementSpan(0, 1, "y")]

    with pytest.raises(InvalidSpanError):
        apply_replacements("abcdef", spans)


def test_out_of_range_span_is_rejected() -> None:
    with pytest.raises(InvalidSpanError):
        apply_replacements("abc", [ReplacementSpan(1, 5, "x")])


def test_sort_spans_orders_by_start_then_end() -> None:
    spans = [ReplacementSpan(5, 6, "c"), ReplacementSpan(1, 2, "b"), ReplacementSpan(1, 1, "a")]

    assert [span.replacement for span in sort_spans(spans)] == ["a", "b", "c"]
