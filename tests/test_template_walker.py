from __future__ import annotations

import pytest

from i18n_core.orchestrator.pipeline import extract_template_text
from i18n_core.policy.policy_loader import default_policy
from i18n_core.utils.errors import ExtractionDepthError


def test_static_attribute_and_text_are_rewritten() -> None:
    result = extract_template_text('<div title="Hello World">Welcome back</div>')

    assert result.rewritten_text == "<div :title=\"$t('hello_world')\">{{ $t('welcome_back') }}</div>"
    assert result.text_map == {"hello_world": "Hello World", "welcome_back": "Welcome back"}


def test_excluded_attributes_and_directives_are_skipped() -> None:
    template = (
        '<button class="Main Box" @click="save(\'Now please\')" '
        'v-if="mode === \'Some Value\'">Save it</button>'
    )

    result = extract_template_text(template)

    assert result.text_map == {"save_it": "Save it"}
    assert result.rewritten_text == template.replace("Save it", "{{ $t('save_it') }}")


def test_bound_string_literal_is_replaced_directly() -> None:
    result = extract_template_text("<input :placeholder=\"'Enter your name'\">")

    assert result.rewritten_text == "<input :placeholder=\"$t('enter_your_name')\">"


def test_call_quote_follows_attribute_quote() -> None:
    result = extract_template_text("<input v-bind:placeholder='\"Enter your name\"'>")

    assert result.rewritten_text == "<input v-bind:placeholder='$t(\"enter_your_name\")'>"


def test_bound_expressions_are_extracted_reentrantly() -> None:
    template = (
        "<span :title=\"ok ? 'Is ready' : 'Not ready'\"></span>"
        "<comp :labels=\"{ ok: 'Confirm action', id: 'main' }\" />"
    )

    result = extract_template_text(template)

    assert result.rewritten_text == (
        "<span :title=\"ok ? $t('is_ready') : $t('not_ready')\"></span>"
        "<comp :labels=\"{ ok: $t('confirm_action'), id: 'main' }\" />"
    )


def test_v_for_source_shares_one_key_for_duplicates() -> None:
    template = "<li v-for=\"item in ['Same Text','Same Text']\">{{ item }}</li>"

    result = extract_template_text(template)

    assert result.text_map == {"same_text": "Same Text"}
    assert result.rewritten_text == (
        "<li v-for=\"item in [$t('same_text'),$t('same_text')]\">{{ item }}</li>"
    )


def test_interpolations_and_plain_segments() -> None:
    template = "<p>Total: {{ count }} items left</p><p>{{ 'Quoted text' }}</p>"

    result = extract_template_text(template)

    assert result.rewritten_text == (
        "<p>{{ $t('total') }} {{ count }} {{ $t('items_left') }}</p>"
        "<p>{{ $t('quoted_text') }}</p>"
    )
    assert result.text_map == {"total": "Total:", "items_left": "items left", "quoted_text": "Quoted text"}


def test_interpolation_with_operators_is_walked() -> None:
    result = extract_template_text("<p>{{ a && b < c ? 'Yes please' : 'No thanks' }}</p>")

    assert result.rewritten_text == "<p>{{ a && b < c ? $t('yes_please') : $t('no_thanks') }}</p>"


def test_raw_html_directive_and_entities() -> None:
    template = "<div v-html=\"'<b>Bold text</b>'\"></div><p>Save &amp; exit</p>"

    result = extract_template_text(template)

    assert result.text_map == {"b_bold_text_b": "<b>Bold text</b>", "save_exit": "Save & exit"}
    assert result.rewritten_text == (
        "<div v-html=\"$t('b_bold_text_b')\"></div><p>{{ $t('save_exit') }}</p>"
    )


def test_attribute_with_interpolation_marker_warns() -> None:
    template = '<div title="Hello {{ name }}"></div>'

    result = extract_template_text(template)

    assert result.rewritten_text == template
    assert [warning.code for warning in result.warnings] == ["interpolation_marker"]


def test_comments_and_nested_elements() -> None:
    template = (
        "<section>\n"
        "  <!-- Not for translators -->\n"
        "  <header><h1>Main heading</h1></header>\n"
        "  <template v-if=\"open\"><span>Inner text</span></template>\n"
        "</section>"
    )

    result = extract_template_text(template)

    assert result.text_map == {"main_heading": "Main heading", "inner_text": "Inner text"}
    assert "<!-- Not for translators -->" in result.rewritten_text


def test_template_rewrite_is_idempotent() -> None:
    first = extract_template_text('<div title="Hello World">Welcome {{ user }} back home</div>')
    second = extract_template_text(first.rewritten_text)

    assert second.rewritten_text == first.rewritten_text
    assert second.text_map == {}


def test_rerun_with_custom_call_prefix_finds_nothing_new() -> None:
    first = extract_template_text('<p title="Hello World">2 items left</p>', "i18n.global.tc")
    second = extract_template_text(first.rewritten_text, "i18n.global.tc")

    assert first.rewritten_text == (
        "<p :title=\"i18n.global.tc('hello_world')\">{{ i18n.global.tc('2_items_left') }}</p>"
    )
    assert second.rewritten_text == first.rewritten_text
    assert second.text_map == {}


def test_deep_template_raises_depth_error() -> None:
    template = "<div>" * 700 + "Deep text" + "</div>" * 700

    with pytest.raises(ExtractionDepthError):
        extract_template_text(template)


def test_embedded_expressions_count_template_nesting() -> None:
    policy = default_policy().model_copy(update={"max_depth": 16})
    attribute = "<div :title=\"" + "[" * 9 + "'Deep text'" + "]" * 9 + "\"></div>"

    assert extract_template_text(attribute, policy=policy).text_map == {"deep_text": "Deep text"}
    with pytest.raises(ExtractionDepthError):
        extract_template_text("<div>" * 10 + attribute + "</div>" * 10, policy=policy)
