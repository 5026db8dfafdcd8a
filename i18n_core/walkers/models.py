"""Extraction result and warning models shared by all walkers."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from i18n_core.rewrite.models import ReplacementSpan

WarningCode = Literal["interpolated_template", "interpolation_marker"]


class WarningItem(BaseModel):
    """Non-fatal signal that a literal was left for manual review."""

    model_config = ConfigDict(extra="forbid")

    code: WarningCode
    message: str
    value: str
    key: str | None = None
    exps: list[str] | None = None


class ExtractionResult(BaseModel):
    """Output of one walker invocation over one block of text."""

    model_config = ConfigDict(extra="forbid")

    text_map: dict[str, str] = Field(default_factory=dict)
    rewritten_text: str
    warnings: list[WarningItem] = Field(default_factory=list)
    spans: list[ReplacementSpan] = Field(default_factory=list)


@dataclass
class WalkOutput:
    """Accumulator returned by each traversal step and merged by its caller."""

    spans: list[ReplacementSpan] = field(default_factory=list)
    text_map: dict[str, str] = field(default_factory=dict)
    warnings: list[WarningItem] = field(default_factory=list)

    def merge(self, other: WalkOutput) -> WalkOutput:
        self.spans.extend(other.spans)
        self.text_map.update(other.text_map)
        self.warnings.extend(other.warnings)
        return self

    def add(self, span: ReplacementSpan, key: str, text: str) -> WalkOutput:
        self.spans.append(span)
        self.text_map[key] = text
        return self

    def warn(self, warning: WarningItem | None) -> WalkOutput:
        if warning is not None:
            self.warnings.append(warning)
        return self


def depth_limit(max_depth: int) -> int:
    """Clamp a configured nesting limit so the walk stops before Python's own limit."""

    return min(max_depth, sys.getrecursionlimit() // 2)
