"""Literal extraction for JavaScript, TypeScript and JSX syntax trees.

Traversal is driven by ``_CHILDREN``, a table from node kind to the child
nodes worth descending into. Literal kinds (strings, template strings, JSX
text and attributes) are handled by the walker itself; every other kind is
looked up in the table and kinds missing from it are not descended.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from tree_sitter import Node

from i18n_core.checks.eligibility import attribute_name_needs_extraction, check_value
from i18n_core.keys.state import ExtractorState
from i18n_core.policy.models import ExtractionPolicy
from i18n_core.rewrite.models import ReplacementSpan
from i18n_core.rewrite.replacer import apply_replacements, sort_spans
from i18n_core.text.values import remove_brackets, unescape_js_string
from i18n_core.utils.errors import ExtractionDepthError
from i18n_core.walkers.models import ExtractionResult, WalkOutput, WarningItem, depth_limit
from i18n_core.walkers.parsing import Grammar, SourceDocument, parse_source

WrapCall = Callable[[str], str]
ChildrenFn = Callable[[Node], list[Node]]

_PLACEHOLDER_RE = re.compile(r"\{\d+\}")
_JSX_TEXT_KINDS = {"jsx_text", "html_character_reference"}


def _no_children(node: Node) -> list[Node]:
    return []


def _named(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _fields(*names: str) -> ChildrenFn:
    def children(node: Node) -> list[Node]:
        found = [child for name in names for child in node.children_by_field_name(name)]
        return sorted(found, key=lambda child: child.start_byte)

    return children


def _first_named(node: Node) -> list[Node]:
    named = _named(node)
    return named[:1]


def _statements(node: Node) -> list[Node]:
    """Statements of a body, without the leading directive prologue."""

    statements = _named(node)
    index = 0
    while index < len(statements) and _is_directive(statements[index]):
        index += 1
    return statements[index:]


def _is_directive(statement: Node) -> bool:
    if statement.type != "expression_statement":
        return False
    named = _named(statement)
    return len(named) == 1 and named[0].type == "string"


def _binding(node: Node) -> list[Node]:
    """Initializer, plus the binding pattern when it can hold defaults."""

    children = node.children_by_field_name("value")
    for name in node.children_by_field_name("name") + node.children_by_field_name("pattern"):
        if name.type in {"object_pattern", "array_pattern"}:
            children.append(name)
    return sorted(children, key=lambda child: child.start_byte)


def _call_children(node: Node) -> list[Node]:
    arguments = node.child_by_field_name("arguments")
    children = node.children_by_field_name("function")
    # tag`...` is a call whose arguments node is the template itself
    if arguments is not None and arguments.type != "template_string":
        children.append(arguments)
    return children


def _subscript_children(node: Node) -> list[Node]:
    children = node.children_by_field_name("object")
    index = node.child_by_field_name("index")
    if index is not None and index.type not in {"string", "template_string"}:
        children.append(index)
    return children


def _export_children(node: Node) -> list[Node]:
    return _fields("declaration", "value")(node)


_FUNCTION = _fields("parameters", "body")

_CHILDREN: dict[str, ChildrenFn] = {
    # statements
    "program": _statements,
    "statement_block": _statements,
    "expression_statement": _named,
    "lexical_declaration": _named,
    "variable_declaration": _named,
    "variable_declarator": _binding,
    "return_statement": _named,
    "throw_statement": _named,
    "if_statement": _named,
    "else_clause": _named,
    "for_statement": _named,
    "for_in_statement": _fields("right", "body"),
    "while_statement": _named,
    "do_statement": _named,
    "try_statement": _named,
    "catch_clause": _fields("body"),
    "finally_clause": _named,
    "switch_statement": _named,
    "switch_body": _named,
    "switch_case": _named,
    "switch_default": _named,
    "labeled_statement": _fields("body"),
    "export_statement": _export_children,
    "internal_module": _fields("body"),
    # functions and classes
    "function_declaration": _FUNCTION,
    "function_expression": _FUNCTION,
    "function": _FUNCTION,
    "generator_function_declaration": _FUNCTION,
    "generator_function": _FUNCTION,
    "arrow_function": _FUNCTION,
    "method_definition": _FUNCTION,
    "formal_parameters": _named,
    "required_parameter": _binding,
    "optional_parameter": _binding,
    "assignment_pattern": _fields("right"),
    "object_assignment_pattern": _fields("right"),
    "object_pattern": _named,
    "array_pattern": _named,
    "pair_pattern": _fields("value"),
    "class_declaration": _fields("body"),
    "abstract_class_declaration": _fields("body"),
    "class": _fields("body"),
    "class_body": _named,
    "field_definition": _fields("value"),
    "public_field_definition": _fields("value"),
    "class_static_block": _fields("body"),
    # expressions
    "call_expression": _call_children,
    "new_expression": _fields("constructor", "arguments"),
    "arguments": _named,
    "member_expression": _fields("object"),
    "subscript_expression": _subscript_children,
    "assignment_expression": _fields("left", "right"),
    "augmented_assignment_expression": _fields("left", "right"),
    "binary_expression": _fields("left", "right"),
    "unary_expression": _fields("argument"),
    "ternary_expression": _fields("condition", "consequence", "alternative"),
    "parenthesized_expression": _named,
    "sequence_expression": _named,
    "array": _named,
    "object": _named,
    "pair": _fields("value"),
    "spread_element": _named,
    "await_expression": _named,
    "yield_expression": _named,
    # TypeScript
    "as_expression": _first_named,
    "satisfies_expression": _first_named,
    "non_null_expression": _named,
    "enum_declaration": _fields("body"),
    "enum_body": _named,
    "enum_assignment": _fields("value"),
    # JSX
    "jsx_opening_element": _fields("attribute"),
    "jsx_self_closing_element": _fields("attribute"),
    "jsx_expression": _named,
}


@dataclass
class _EcmaWalker:
    document: SourceDocument
    wrap_call: WrapCall
    state: ExtractorState
    policy: ExtractionPolicy
    jsx: bool
    max_depth: int
    callees: set[str] = field(default_factory=set)

    def visit(self, node: Node, depth: int = 0) -> WalkOutput:
        if depth > self.max_depth:
            raise ExtractionDepthError(
                f"Syntax tree deeper than {self.max_depth} levels at '{node.type}'",
                max_depth=self.max_depth,
                node_kind=node.type,
            )

        kind = node.type
        if kind == "string":
            return self._string(node)
        if kind == "template_string":
            return self._template_string(node)
        if kind.startswith("jsx_"):
            if not self.jsx:
                return WalkOutput()
            if kind == "jsx_element":
                return self._jsx_element(node, depth)
            if kind == "jsx_attribute":
                return self._jsx_attribute(node, depth)
        if kind == "call_expression" and self._is_ignored_call(node):
            return WalkOutput()

        output = WalkOutput()
        # Kinds missing from the table (types, imports, decorators) are leaves.
        for child in _CHILDREN.get(kind, _no_children)(node):
            output.merge(self.visit(child, depth + 1))
        return output

    def _is_ignored_call(self, node: Node) -> bool:
        function = node.child_by_field_name("function")
        if function is None:
            return False
        return _normalize_callee(self.document.node_text(function)) in self.callees

    def _replace(self, start: int, end: int, text: str, *, braces: bool = False) -> WalkOutput:
        eligibility = check_value(text, self.policy)
        output = WalkOutput().warn(eligibility.warning)
        if not eligibility.extract:
            return output
        key = self.state.generate_unique_key(text)
        call = self.wrap_call(key)
        if braces:
            call = "{" + call + "}"
        return output.add(ReplacementSpan(start, end, call), key, text)

    def _string(self, node: Node) -> WalkOutput:
        position = self.document.position(node)
        raw = self.document.text[position.start : position.end]
        return self._replace(position.start, position.end, unescape_js_string(raw[1:-1]))

    def _template_string(self, node: Node) -> WalkOutput:
        position = self.document.position(node)
        substitutions = [child for child in node.named_children if child.type == "template_substitution"]
        if not substitutions:
            raw = self.document.text[position.start : position.end]
            return self._replace(position.start, position.end, unescape_js_string(raw[1:-1]))

        parts: list[str] = []
        exps: list[str] = []
        cursor = position.start + 1
        for index, substitution in enumerate(substitutions):
            span = self.document.position(substitution)
            parts.append(unescape_js_string(self.document.text[cursor : span.start]))
            parts.append(f"{{{index}}}")
            cursor = span.end
            exps.extend(self._member_property(substitution))
        parts.append(unescape_js_string(self.document.text[cursor : position.end - 1]))
        display = "".join(parts)

        static_text = _PLACEHOLDER_RE.sub(" ", display)
        if not check_value(static_text, self.policy).extract:
            return WalkOutput()
        return WalkOutput().warn(
            WarningItem(
                code="interpolated_template",
                message="Template literal with interpolation needs manual extraction",
                value=display,
                key=self.state.generate_unique_key(display),
                exps=exps,
            )
        )

    def _member_property(self, substitution: Node) -> list[str]:
        expressions = _named(substitution)
        if not expressions or expressions[0].type != "member_expression":
            return []
        prop = expressions[0].child_by_field_name("property")
        if prop is None or prop.type not in {"property_identifier", "private_property_identifier"}:
            return []
        return [self.document.node_text(prop)]

    def _jsx_element(self, node: Node, depth: int) -> WalkOutput:
        output = WalkOutput()
        run: list[Node] = []
        for child in node.named_children:
            if child.type in _JSX_TEXT_KINDS:
                run.append(child)
                continue
            if run:
                output.merge(self._jsx_text(run))
                run = []
            # Each JSX level costs two frames, visit and _jsx_element.
            output.merge(self.visit(child, depth + 2))
        if run:
            output.merge(self._jsx_text(run))
        return output

    def _jsx_text(self, run: list[Node]) -> WalkOutput:
        start = self.document.position(run[0]).start
        end = self.document.position(run[-1]).end
        raw = self.document.text[start:end]
        stripped = raw.strip()
        if not stripped:
            return WalkOutput()
        leading = len(raw) - len(raw.lstrip())
        return self._replace(
            start + leading,
            start + leading + len(stripped),
            html.unescape(stripped),
            braces=True,
        )

    def _jsx_attribute(self, node: Node, depth: int) -> WalkOutput:
        named = node.named_children
        if len(named) < 2:
            return WalkOutput()
        name, value = named[0], named[-1]
        if value.type != "string":
            return self.visit(value, depth + 2)
        if not attribute_name_needs_extraction(self.document.node_text(name), self.policy):
            return WalkOutput()
        position = self.document.position(value)
        raw = self.document.text[position.start : position.end]
        return self._replace(position.start, position.end, html.unescape(raw[1:-1]), braces=True)


def extract_ecma(
    code: str,
    wrap_call: WrapCall,
    *,
    state: ExtractorState,
    policy: ExtractionPolicy,
    grammar: Grammar = "javascript",
    jsx: bool = False,
    call_prefix: str | None = None,
    depth: int = 0,
) -> ExtractionResult:
    """Extract literals from one script and rewrite them with ``wrap_call``.

    Arguments of ``call_prefix`` calls are left alone like those of the policy
    callees, so a second run over the output finds nothing new. ``depth`` is
    the nesting level the script starts at when it is embedded in a template.

    Raises:
        ExtractionParseError: ``code`` does not parse with ``grammar``.
        ExtractionDepthError: the tree is nested deeper than ``policy.max_depth``.
    """

    document = parse_source(code, grammar)
    callees = policy.translation_callees()
    if call_prefix:
        callees.add(_normalize_callee(call_prefix))
    walker = _EcmaWalker(
        document=document,
        wrap_call=wrap_call,
        state=state,
        policy=policy,
        jsx=jsx,
        max_depth=depth_limit(policy.max_depth),
        callees=callees,
    )
    output = walker.visit(document.root, depth)
    spans = sort_spans(output.spans)
    return ExtractionResult(
        text_map=output.text_map,
        rewritten_text=apply_replacements(code, spans),
        warnings=output.warnings,
        spans=spans,
    )


def extract_embedded(
    expression: str,
    wrap_call: WrapCall,
    *,
    state: ExtractorState,
    policy: ExtractionPolicy,
    call_prefix: str | None = None,
    depth: int = 0,
) -> ExtractionResult:
    """Extract literals from a JavaScript expression found in another grammar.

    The expression is parsed as ``(<expression>)`` so that object literals are
    not read as blocks; the synthetic parentheses are stripped from the result
    and span offsets are reported relative to ``expression``.
    """

    wrapped = f"({expression})"
    result = extract_ecma(
        wrapped,
        wrap_call,
        state=state,
        policy=policy,
        grammar="javascript",
        call_prefix=call_prefix,
        depth=depth,
    )
    return ExtractionResult(
        text_map=result.text_map,
        rewritten_text=remove_brackets(result.rewritten_text),
        warnings=result.warnings,
        spans=[span.shifted(-1) for span in result.spans],
    )


def _normalize_callee(callee: str) -> str:
    return "".join(callee.split()).replace("?.", ".")
