"""Result models for whole-document extraction runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from i18n_core.walkers.models import WarningItem

FileType = Literal["vue", "js", "ts", "jsx", "tsx"]
BlockType = Literal["template", "script", "style", "custom"]


@dataclass(frozen=True)
class SfcBlock:
    """Top-level block of a single-file component.

    ``start``/``end`` delimit the block content (between the tags) in the
    original document.
    """

    type: BlockType
    tag: str
    start: int
    end: int
    content: str
    attrs: dict[str, str | None] = field(default_factory=dict)

    @property
    def setup(self) -> bool:
        return "setup" in self.attrs

    @property
    def lang(self) -> str | None:
        return self.attrs.get("lang")


class SfcExtractionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text_map: dict[str, str] = Field(default_factory=dict)
    rewritten_text: str
    warnings: list[WarningItem] = Field(default_factory=list)
    blocks: list[str] = Field(default_factory=list)


class DocumentExtraction(BaseModel):
    """Everything one run produces for one source document."""

    model_config = ConfigDict(extra="forbid")

    file_type: FileType
    output: str
    text_map: dict[str, str] = Field(default_factory=dict)
    extracted: dict[str, Any] = Field(default_factory=dict)
    warnings: list[WarningItem] = Field(default_factory=list)
