"""Data models for extraction policy and call rendering."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ScriptLang = Literal["js", "ts", "jsx", "tsx"]


class CallPolicy(BaseModel):
    """Call prefixes used to render replacement expressions per context."""

    model_config = ConfigDict(extra="forbid")

    script: str = "this.$t"
    script_setup: str = "$t"
    template: str = "$t"
    jsx: str = "t"

    def script_prefix(self, *, setup: bool = False, lang: str | None = None) -> str:
        """Pick the call prefix for a script block.

        Setup blocks and TypeScript-flavoured blocks are assumed to use the
        composition API, so they get the prefix without ``this``.
        """

        if setup or (lang or "").lower() in {"ts", "tsx"}:
            return self.script_setup
        return self.script

    def all_prefixes(self) -> list[str]:
        return sorted({self.script, self.script_setup, self.template, self.jsx})


class ExtractionPolicy(BaseModel):
    """Extraction policy loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    min_length: int = Field(default=2, ge=1)
    max_key_length: int = Field(default=32, ge=8)
    max_depth: int = Field(default=500, ge=16)
    skip_urls: bool = True
    skip_identifiers: bool = True
    skip_class_lists: bool = True
    ignored_values: list[str] = Field(default_factory=list)
    excluded_attributes: list[str] = Field(default_factory=list)
    excluded_attribute_patterns: list[str] = Field(default_factory=list)
    ignored_callees: list[str] = Field(default_factory=list)
    calls: CallPolicy = Field(default_factory=CallPolicy)

    def translation_callees(self) -> set[str]:
        """Callees whose arguments are never extracted, call prefixes included."""

        return {*self.ignored_callees, *self.calls.all_prefixes()}


def render_call(prefix: str, key: str, quote: str = "'") -> str:
    """Render a translation call such as ``$t('app.title')``."""

    return f"{prefix}({quote}{key}{quote})"
