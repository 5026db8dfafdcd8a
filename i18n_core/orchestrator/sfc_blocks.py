"""Split a Vue single-file component into its top-level blocks."""

from __future__ import annotations

from tree_sitter import Node

from i18n_core.orchestrator.models import BlockType, SfcBlock
from i18n_core.walkers.parsing import SourceDocument, parse_source
from i18n_core.walkers.template import mask_template

_BLOCK_TYPES: dict[str, BlockType] = {"template": "template", "script": "script", "style": "style"}


def split_sfc(source: str) -> list[SfcBlock]:
    """Return the top-level blocks of ``source`` in document order.

    Self-closing blocks carry no content and are omitted.

    Raises:
        ExtractionParseError: the component markup does not parse.
    """

    document = parse_source(mask_template(source), "html")
    blocks: list[SfcBlock] = []
    for node in document.root.named_children:
        block = _block_from_node(document, source, node)
        if block is not None:
            blocks.append(block)
    return blocks


def _block_from_node(document: SourceDocument, source: str, node: Node) -> SfcBlock | None:
    if node.type not in {"element", "script_element", "style_element"}:
        return None

    start_tag = next((child for child in node.named_children if child.type == "start_tag"), None)
    end_tag = next((child for child in node.named_children if child.type == "end_tag"), None)
    if start_tag is None or end_tag is None:
        return None

    tag = _tag_name(document, source, start_tag)
    start = document.position(start_tag).end
    end = document.position(end_tag).start
    return SfcBlock(
        type=_BLOCK_TYPES.get(tag, "custom"),
        tag=tag,
        start=start,
        end=end,
        content=source[start:end],
        attrs=_attributes(document, source, start_tag),
    )


def _tag_name(document: SourceDocument, source: str, start_tag: Node) -> str:
    for child in start_tag.named_children:
        if child.type == "tag_name":
            position = document.position(child)
            return source[position.start : position.end].lower()
    return ""


def _attributes(document: SourceDocument, source: str, start_tag: Node) -> dict[str, str | None]:
    attrs: dict[str, str | None] = {}
    for attribute in start_tag.named_children:
        if attribute.type != "attribute":
            continue
        name: str | None = None
        value: str | None = None
        for child in attribute.named_children:
            position = document.position(child)
            text = source[position.start : position.end]
            if child.type == "attribute_name":
                name = text
            elif child.type == "attribute_value":
                value = text
            elif child.type == "quoted_attribute_value":
                value = text[1:-1]
        if name is not None:
            attrs[name] = value
    return attrs
