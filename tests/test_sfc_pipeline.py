from __future__ import annotations

import logging

import pytest

from i18n_core.orchestrator.pipeline import extract_source, extract_vue, file_type_from_path
from i18n_core.orchestrator.sfc_blocks import split_sfc
from i18n_core.utils.errors import ExtractionParseError

_COMPONENT = """<template>
  <div title="Hello World">Welcome back</div>
</template>

<script>
export default {
  data() {
    return { msg: "Good morning", other: "Hello World" }
  }
}
</script>

<style scoped>
.a::before { content: "Hello World"; }
</style>
"""


def test_split_sfc_returns_blocks_in_document_order() -> None:
    blocks = split_sfc(_COMPONENT)

    assert [block.type for block in blocks] == ["template", "script", "style"]
    assert blocks[0].content == '\n  <div title="Hello World">Welcome back</div>\n'
    assert _COMPONENT[blocks[1].start : blocks[1].end] == blocks[1].content
    assert blocks[2].attrs == {"scoped": None}


def test_split_sfc_reads_setup_and_lang() -> None:
    blocks = split_sfc('<script setup lang="ts">const a = 1</script>\n<i18n>{"en": {}}</i18n>')

    assert blocks[0].setup is True
    assert blocks[0].lang == "ts"
    assert blocks[1].type == "custom"
    assert blocks[1].tag == "i18n"


def test_extract_vue_rewrites_template_and_script_only() -> None:
    result = extract_vue(_COMPONENT)

    assert "<div :title=\"$t('hello_world')\">{{ $t('welcome_back') }}</div>" in result.rewritten_text
    assert "return { msg: this.$t('good_morning'), other: this.$t('hello_world') }" in result.rewritten_text
    assert '.a::before { content: "Hello World"; }' in result.rewritten_text
    assert result.text_map == {
        "hello_world": "Hello World",
        "welcome_back": "Welcome back",
        "good_morning": "Good morning",
    }
    assert result.blocks == ["template", "script"]


def test_extract_vue_keeps_everything_outside_blocks() -> None:
    result = extract_vue(_COMPONENT)

    assert result.rewritten_text.startswith("<template>\n  <div ")
    assert "</template>\n\n<script>\nexport default {" in result.rewritten_text
    assert result.rewritten_text.endswith("</style>\n")


def test_script_setup_and_typescript_blocks_use_bare_call() -> None:
    source = (
        "<template><p>Page title</p></template>\n"
        '<script setup lang="ts">\nconst label: string = "Page subtitle"\n</script>\n'
    )

    result = extract_vue(source, key_prefix="home")

    assert "<p>{{ $t('home.page_title') }}</p>" in result.rewritten_text
    assert "const label: string = $t('home.page_subtitle')" in result.rewritten_text


def test_extract_vue_without_translatable_text_is_unchanged() -> None:
    source = "<template><div :class=\"cls\"></div></template>\n<script>export default {}</script>\n"

    result = extract_vue(source)

    assert result.rewritten_text == source
    assert result.text_map == {}


def test_extract_source_nests_catalog_and_logs_events(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="i18n_extract.pipeline")

    extraction = extract_source('const a = "Hello World"', "js", key_prefix="app", call_prefix="i18n.t")

    assert extraction.output == "const a = i18n.t('app.hello_world')"
    assert extraction.extracted == {"app": {"hello_world": "Hello World"}}
    messages = [record.message for record in caplog.records if record.name == "i18n_extract.pipeline"]
    assert any('"event":"start"' in message for message in messages)
    assert any('"event":"done"' in message and '"key_count":1' in message for message in messages)


def test_extract_source_logs_and_reraises_parse_errors(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="i18n_extract.pipeline")

    with pytest.raises(ExtractionParseError):
        extract_source("const = ;", "ts")

    messages = [record.message for record in caplog.records if record.name == "i18n_extract.pipeline"]
    assert any('"event":"error"' in message and "ExtractionParseError" in message for message in messages)


def test_extract_source_dispatches_jsx() -> None:
    extraction = extract_source("const A = () => <p>Hello World</p>;", "jsx")

    assert extraction.output == "const A = () => <p>{t('hello_world')}</p>;"


def test_extract_source_rejects_unknown_file_type() -> None:
    with pytest.raises(ValueError, match="Unsupported file type"):
        extract_source("x", "py")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("path", "expected"),
    [("App.vue", "vue"), ("a.js", "js"), ("a.mjs", "js"), ("a.ts", "ts"), ("a.jsx", "jsx"), ("A.TSX", "tsx")],
)
def test_file_type_from_path(path: str, expected: str) -> None:
    assert file_type_from_path(path) == expected


def test_file_type_from_path_rejects_unknown_suffix() -> None:
    with pytest.raises(ValueError, match="Unsupported file type"):
        file_type_from_path("notes.md")
