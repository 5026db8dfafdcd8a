"""Data models for source positions and replacement spans."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourcePosition:
    """Half-open character range into one block of source text."""

    start: int
    end: int


@dataclass(frozen=True)
class ReplacementSpan:
    """Replace ``original[start:end]`` with ``replacement``."""

    start: int
    end: int
    replacement: str

    def shifted(self, offset: int) -> ReplacementSpan:
        return ReplacementSpan(self.start + offset, self.end + offset, self.replacement)
