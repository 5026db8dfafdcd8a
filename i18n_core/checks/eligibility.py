"""Decide whether a literal or an attribute name carries translatable text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from i18n_core.policy.models import ExtractionPolicy
from i18n_core.walkers.models import WarningItem

_INTERPOLATION_MARKERS = ("{{", "}}", "${")

_CJK_RE = re.compile(r"[㐀-䶿一-鿿豈-﫿]")
_URL_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*://|//|www\.|mailto:|tel:|data:)\S*$", re.I)
_EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(?:\.[\w-]+)+$")
_PATH_RE = re.compile(r"^(?:\.{1,2}/|~/|@/|/)\S*$")
_FILE_RE = re.compile(r"^\S+\.(?:png|jpe?g|gif|svg|webp|ico|js|mjs|ts|jsx|tsx|vue|css|scss|less|json|html?)$", re.I)

_LOWER_TOKEN_RE = re.compile(r"^[a-z_$][a-z0-9_$]*(?:[.:/-][a-z0-9_$]+)*$")
_CAMEL_RE = re.compile(r"^[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+$")
_CONSTANT_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)+$")
_CLASS_TOKEN_RE = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")


@dataclass(frozen=True)
class Eligibility:
    """Outcome of a value check; ``warning`` is set for borderline rejections."""

    extract: bool
    warning: WarningItem | None = None


_SKIP = Eligibility(extract=False)
_EXTRACT = Eligibility(extract=True)


def check_value(text: str, policy: ExtractionPolicy) -> Eligibility:
    """Classify ``text`` against the rejection rules of ``policy``."""

    trimmed = text.strip()
    if not trimmed:
        return _SKIP
    if _already_wrapped(trimmed, tuple(sorted(policy.translation_callees()))):
        return _SKIP
    if any(marker in trimmed for marker in _INTERPOLATION_MARKERS):
        return Eligibility(
            extract=False,
            warning=WarningItem(
                code="interpolation_marker",
                message="Text contains interpolation markers and was left untouched",
                value=text,
            ),
        )
    if not any(char.isalpha() for char in trimmed):
        return _SKIP
    if len(trimmed) < policy.min_length and not _CJK_RE.search(trimmed):
        return _SKIP
    if trimmed.lower() in {value.lower() for value in policy.ignored_values}:
        return _SKIP
    if policy.skip_urls and _looks_like_location(trimmed):
        return _SKIP
    if policy.skip_identifiers and _looks_like_identifier(trimmed):
        return _SKIP
    if policy.skip_class_lists and _looks_like_class_list(trimmed):
        return _SKIP
    return _EXTRACT


def value_needs_extraction(text: str, policy: ExtractionPolicy) -> bool:
    return check_value(text, policy).extract


def attribute_name_needs_extraction(name: str, policy: ExtractionPolicy) -> bool:
    """Return False for attributes that never hold user-facing text."""

    if not name:
        return False
    if name in policy.excluded_attributes:
        return False
    return not any(
        pattern.search(name)
        for pattern in _compiled_patterns(tuple(policy.excluded_attribute_patterns))
    )


@lru_cache(maxsize=32)
def _compiled_patterns(patterns: tuple[str, ...]) -> list[re.Pattern[str]]:
    return [re.compile(pattern) for pattern in patterns]


@lru_cache(maxsize=32)
def _callee_pattern(callees: tuple[str, ...]) -> re.Pattern[str] | None:
    if not callees:
        return None
    alternatives = "|".join(re.escape(callee) for callee in sorted(callees, key=len, reverse=True))
    return re.compile(rf"(?:{alternatives})\s*\(.*\)", re.S)


def _already_wrapped(text: str, callees: tuple[str, ...]) -> bool:
    pattern = _callee_pattern(callees)
    return pattern is not None and pattern.fullmatch(text) is not None


def _looks_like_location(text: str) -> bool:
    if any(char.isspace() for char in text):
        return False
    return bool(
        _URL_RE.match(text)
        or _EMAIL_RE.match(text)
        or _PATH_RE.match(text)
        or _FILE_RE.match(text)
    )


def _looks_like_identifier(text: str) -> bool:
    if not text.isascii() or any(char.isspace() for char in text):
        return False
    return bool(
        _LOWER_TOKEN_RE.match(text) or _CAMEL_RE.match(text) or _CONSTANT_RE.match(text)
    )


def _looks_like_class_list(text: str) -> bool:
    tokens = text.split()
    if not tokens or not text.isascii():
        return False
    if not all(_CLASS_TOKEN_RE.match(token) for token in tokens):
        return False
    return any("-" in token for token in tokens)
