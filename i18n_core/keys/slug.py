"""Turn arbitrary text into a Latin-only, underscore-delimited key fragment."""

from __future__ import annotations

import re
import unicodedata

from pypinyin import Style, lazy_pinyin

_CJK_RE = re.compile(r"[一-鿿]")
_NON_WORD_RE = re.compile(r"[^a-zA-Z0-9_\s]+")
_LOWER_UPPER_RE = re.compile(r"([a-z0-9])([A-Z])")
_UPPER_RUN_RE = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[_\s]+")


def transliterate(text: str) -> str:
    """Replace Chinese ideographs with tone-free pinyin and drop accents."""

    if _CJK_RE.search(text):
        text = " ".join(lazy_pinyin(text, style=Style.NORMAL))
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def split_words(text: str) -> list[str]:
    spaced = _UPPER_RUN_RE.sub(r"\1 \2", _LOWER_UPPER_RE.sub(r"\1 \2", text))
    return [word for word in _SEPARATOR_RE.split(spaced) if word]


def format_i18n_key(
    value: int | float | str,
    separator: str = "_",
    limit_length: int = -1,
) -> str:
    """Build the key fragment for ``value``.

    Numbers map to ``n<separator><value>``. Text is transliterated, every run
    of characters outside ``[A-Za-z0-9_\\s]`` becomes ``_``, camel-case
    boundaries are split and the lower-cased words are joined with
    ``separator``. The result is cut to ``limit_length`` (when positive) and
    stripped of leading and trailing separators.
    """

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"n{separator}{value}"
    if not value:
        return ""

    text = _NON_WORD_RE.sub("_", transliterate(str(value)))
    slug = separator.join(word.lower() for word in split_words(text))
    if limit_length > 0:
        slug = slug[:limit_length]
    return slug.strip(separator)
