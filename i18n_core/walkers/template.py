"""Literal extraction for Vue templates parsed with the HTML grammar."""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass

from tree_sitter import Node

from i18n_core.checks.eligibility import attribute_name_needs_extraction, check_value
from i18n_core.keys.state import ExtractorState
from i18n_core.policy.models import ExtractionPolicy
from i18n_core.rewrite.models import ReplacementSpan, SourcePosition
from i18n_core.rewrite.replacer import apply_replacements, sort_spans
from i18n_core.text.values import is_string_literal, literal_value
from i18n_core.utils.errors import ExtractionDepthError
from i18n_core.walkers.ecma import extract_embedded
from i18n_core.walkers.models import ExtractionResult, WalkOutput, depth_limit
from i18n_core.walkers.parsing import SourceDocument, parse_source

QuotedWrapCall = Callable[[str, str], str]

_INTERPOLATION_RE = re.compile(r"\{\{(.*?)\}\}", re.S)
_FOR_SOURCE_RE = re.compile(r"^(.*?)\s+(?:in|of)\s+(.*?)\s*$", re.S)
_BARE_TEXT_CHAR_RE = re.compile(r"&(?![#A-Za-z])|<(?=[\s\d=])")
_TEXT_KINDS = {"text", "entity"}
_SKIPPED_KINDS = {"comment", "script_element", "style_element", "doctype"}


@dataclass(frozen=True)
class _AttributeValue:
    position: SourcePosition
    content: SourcePosition
    quote: str | None


def mask_template(template_text: str) -> str:
    """Blank out text the HTML grammar cannot tokenize, keeping every offset.

    Interpolation bodies (``{{ a && b < c }}``) and bare ``&``/``<`` in text
    become ``_`` so the tree shape matches what the Vue compiler sees.
    """

    def _blank(match: re.Match[str]) -> str:
        body = "".join(char if char.isspace() else "_" for char in match.group(1))
        return "{{" + body + "}}"

    masked = _INTERPOLATION_RE.sub(_blank, template_text)
    return _BARE_TEXT_CHAR_RE.sub("_", masked)


@dataclass
class _TemplateWalker:
    document: SourceDocument
    source: str
    wrap_call: QuotedWrapCall
    state: ExtractorState
    policy: ExtractionPolicy
    max_depth: int
    call_prefix: str | None = None

    def visit(self, node: Node, depth: int = 0) -> WalkOutput:
        if depth > self.max_depth:
            raise ExtractionDepthError(
                f"Template tree deeper than {self.max_depth} levels at '{node.type}'",
                max_depth=self.max_depth,
                node_kind=node.type,
            )

        output = WalkOutput()
        if node.type in _SKIPPED_KINDS:
            return output

        for child in node.named_children:
            if child.type in {"start_tag", "self_closing_tag"}:
                for attribute in child.named_children:
                    if attribute.type == "attribute":
                        output.merge(self._attribute(attribute, depth + 1))

        run: list[Node] = []
        for child in node.named_children:
            if child.type in _TEXT_KINDS:
                run.append(child)
                continue
            if run:
                output.merge(self._text_run(run, depth + 1))
                run = []
            if child.type == "element":
                output.merge(self.visit(child, depth + 1))
        if run:
            output.merge(self._text_run(run, depth + 1))
        return output

    def _slice(self, position: SourcePosition) -> str:
        return self.source[position.start : position.end]

    def _extract(self, span: SourcePosition, text: str, replacement: Callable[[str], str]) -> WalkOutput:
        eligibility = check_value(text, self.policy)
        output = WalkOutput().warn(eligibility.warning)
        if not eligibility.extract:
            return output
        key = self.state.generate_unique_key(text)
        return output.add(ReplacementSpan(span.start, span.end, replacement(key)), key, text)

    # attributes

    def _attribute(self, node: Node, depth: int) -> WalkOutput:
        name_node = next((child for child in node.named_children if child.type == "attribute_name"), None)
        value = self._attribute_value(node)
        if name_node is None or value is None:
            return WalkOutput()

        name = self._slice(self.document.position(name_node))
        content = self._slice(value.content)
        quote = '"' if value.quote == "'" else "'"

        if name == "v-for":
            return self._for_source(content, value.content.start, quote, depth)
        if name == "v-html":
            return self._bound(content, value.content.start, quote, depth)
        if name.startswith((":", "v-bind:")):
            bound_name = name[1:] if name.startswith(":") else name[len("v-bind:") :]
            if not attribute_name_needs_extraction(bound_name.split(".")[0], self.policy):
                return WalkOutput()
            return self._bound(content, value.content.start, quote, depth)
        if name.startswith(("v-", "@", "#")):
            return WalkOutput()
        if not attribute_name_needs_extraction(name, self.policy):
            return WalkOutput()

        output = self._extract(
            value.position,
            html.unescape(content),
            lambda key: '"' + self.wrap_call(key, "'") + '"',
        )
        if output.spans:
            name_position = self.document.position(name_node)
            output.spans.append(ReplacementSpan(name_position.start, name_position.end, f":{name}"))
        return output

    def _attribute_value(self, node: Node) -> _AttributeValue | None:
        for child in node.named_children:
            if child.type == "attribute_value":
                position = self.document.position(child)
                return _AttributeValue(position=position, content=position, quote=None)
            if child.type == "quoted_attribute_value":
                position = self.document.position(child)
                inner = next((grand for grand in child.named_children if grand.type == "attribute_value"), None)
                content = (
                    self.document.position(inner)
                    if inner is not None
                    else SourcePosition(position.start + 1, position.start + 1)
                )
                return _AttributeValue(position=position, content=content, quote=self.source[position.start])
        return None

    def _for_source(self, content: str, offset: int, quote: str, depth: int) -> WalkOutput:
        match = _FOR_SOURCE_RE.match(content)
        if match is None or not match.group(2):
            return WalkOutput()
        return self._embedded(match.group(2), offset + match.start(2), quote, depth)

    def _bound(self, content: str, offset: int, quote: str, depth: int) -> WalkOutput:
        expression = content.strip()
        if not expression:
            return WalkOutput()
        start = offset + len(content) - len(content.lstrip())
        if expression.startswith(("{", "[")) or not is_string_literal(expression):
            return self._embedded(expression, start, quote, depth)
        return self._extract(
            SourcePosition(start, start + len(expression)),
            literal_value(expression),
            lambda key: self.wrap_call(key, quote),
        )

    def _embedded(self, expression: str, offset: int, quote: str, depth: int) -> WalkOutput:
        result = extract_embedded(
            expression,
            lambda key: self.wrap_call(key, quote),
            state=self.state,
            policy=self.policy,
            call_prefix=self.call_prefix,
            depth=depth,
        )
        return WalkOutput(
            spans=[span.shifted(offset) for span in result.spans],
            text_map=dict(result.text_map),
            warnings=list(result.warnings),
        )

    # text

    def _text_run(self, run: list[Node], depth: int) -> WalkOutput:
        start = self.document.position(run[0]).start
        end = self.document.position(run[-1]).end
        raw = self.source[start:end]

        output = WalkOutput()
        cursor = 0
        for match in _INTERPOLATION_RE.finditer(raw):
            output.merge(self._plain_text(raw[cursor : match.start()], start + cursor))
            output.merge(self._interpolation(match, start, depth))
            cursor = match.end()
        output.merge(self._plain_text(raw[cursor:], start + cursor))
        return output

    def _interpolation_call(self, key: str) -> str:
        return "{{ " + self.wrap_call(key, "'") + " }}"

    def _plain_text(self, segment: str, offset: int) -> WalkOutput:
        stripped = segment.strip()
        if not stripped:
            return WalkOutput()
        begin = offset + len(segment) - len(segment.lstrip())
        return self._extract(
            SourcePosition(begin, begin + len(stripped)),
            html.unescape(stripped),
            self._interpolation_call,
        )

    def _interpolation(self, match: re.Match[str], offset: int, depth: int) -> WalkOutput:
        inner = match.group(1)
        expression = inner.strip()
        if not expression:
            return WalkOutput()
        if not is_string_literal(expression):
            inner_start = offset + match.start(1) + len(inner) - len(inner.lstrip())
            return self._embedded(expression, inner_start, "'", depth)
        return self._extract(
            SourcePosition(offset + match.start(), offset + match.end()),
            literal_value(expression).strip(),
            self._interpolation_call,
        )


def extract_template(
    template_text: str,
    wrap_call: QuotedWrapCall,
    *,
    state: ExtractorState,
    policy: ExtractionPolicy,
    call_prefix: str | None = None,
) -> ExtractionResult:
    """Extract literals from the inner text of a ``<template>`` block.

    ``wrap_call(key, quote)`` renders the translation call; ``quote`` is the
    string delimiter that is safe in the surrounding context. Embedded
    expressions leave ``call_prefix`` calls alone.

    Raises:
        ExtractionParseError: the template or an embedded expression does not parse.
    """

    document = parse_source(mask_template(template_text), "html")
    walker = _TemplateWalker(
        document=document,
        source=template_text,
        wrap_call=wrap_call,
        state=state,
        policy=policy,
        max_depth=depth_limit(policy.max_depth),
        call_prefix=call_prefix,
    )
    output = walker.visit(document.root)
    spans = sort_spans(output.spans)
    return ExtractionResult(
        text_map=output.text_map,
        rewritten_text=apply_replacements(template_text, spans),
        warnings=output.warnings,
        spans=spans,
    )
